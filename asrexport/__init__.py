"""Calendar event cleaner + CSV exporter."""
