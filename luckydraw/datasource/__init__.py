from .base import RosterSource, build_entry
from .csv_file import CsvRosterSource, parse_csv_text
from .http_api import HttpJsonRosterSource, HttpJsonRosterSourceConfig
from .xlsx_file import XlsxRosterSource, parse_xlsx_bytes

__all__ = [
    "RosterSource",
    "build_entry",
    "CsvRosterSource",
    "parse_csv_text",
    "HttpJsonRosterSource",
    "HttpJsonRosterSourceConfig",
    "XlsxRosterSource",
    "parse_xlsx_bytes",
]
