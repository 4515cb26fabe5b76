"""
Central field definitions used across the project.

The calendar backend returns documents with verbose, system-generated field
names. This module defines the canonical (short) names so that:
- the normalizer and the exporter share the same field names
- the rename table lives in exactly one place

Records are kept as plain dicts: the set of keys differs from batch to batch,
so a fixed dataclass would not fit.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

# A flat record (normalized event or any row handed to the CSV exporter).
# Values are str | int | float | bool | None.
Record = dict[str, Any]


# Direct renames of scalar fields (raw name -> canonical name).
FIELD_MAP: Mapping[str, str] = MappingProxyType(
    {
        "event_title_text": "title",
        "event_details_text": "details",
        "event_status_text": "status",
        "event_location_text": "location",
        "academic_year_option_academic_years": "academic_year",
        "year_option_year": "year",
        "module_option_modules": "module",
        "speciality_option_speciality": "speciality",
        "cpp_module_option_speciality": "cpp_speciality",
        "student_count_number": "student_count",
        "event_duration_hrs_number": "duration_hours",
        "online_boolean": "is_online",
        "cpp_boolean": "is_cpp",
        "event_canceled_boolean": "is_cancelled",
        "site_option_sites": "site",
    }
)

# Raw timestamp fields -> canonical ISO field.
# NOTE: "strat_" is the literal field name delivered by the backend.
TIMESTAMP_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "strat_date_and_time_date": "start_time_utc",
        "end_date_and_time_date": "end_time_utc",
    }
)

# Raw list fields -> canonical count field.
COUNT_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "teachers_list_user": "teacher_count",
        "attended_yes_list_custom_student_info": "attendance_yes_count",
        "attended_no_list_custom_student_info": "attendance_no_count",
    }
)

SOURCE_KEY = "_source"
DOCS_KEY = "docs"
EVENTS_KEY = "events"

ARCHIVED_STATUS = "Archived"

# Columns that get spreadsheet date formatting on export.
DATE_COLUMNS = frozenset(TIMESTAMP_FIELDS.values())
