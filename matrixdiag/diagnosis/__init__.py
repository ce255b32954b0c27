"""Diagnosis — localize faulty pins, diodes and joints from failing keys.

Submodules:
  models         FailureReport, KeyPosition, report type constants.
  engine         Main localization algorithm (localize_failures).
  describe       Human-readable report text (describe_report, render_reports).
  serialization  JSON conversion (reports_to_dict, parse_reports).
"""

from .models import FailureReport, KeyPosition
from .engine import localize_failures, resolve_owner, valid_shields, locate_keys
from .describe import ReportText, describe_report, render_reports
from .serialization import report_to_dict, reports_to_dict, parse_reports

__all__ = [
    # Models
    "FailureReport", "KeyPosition",
    # Engine
    "localize_failures", "resolve_owner", "valid_shields", "locate_keys",
    # Describe
    "ReportText", "describe_report", "render_reports",
    # Serialization
    "report_to_dict", "reports_to_dict", "parse_reports",
]
