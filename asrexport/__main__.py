"""
Package entry point.

Allows running the application via:

    python -m asrexport

This simply forwards execution to asrexport.cli.main().
"""

from asrexport.cli import main

if __name__ == "__main__":
    main()
