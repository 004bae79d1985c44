"""Protocol layer: report encoding and decoding."""

from .report import encode, build_report, KEEP_REPORT, RESET_REPORT
from .parser import ReportFields, parse_report
