"""Services for reading, converting and analyzing spreadsheets."""

from llm_xlsx_parser.services.analyzer import (
    DEFAULT_SYSTEM_PROMPT,
    AnalysisOptions,
    AnalysisResult,
    SpreadsheetAnalyzer,
)
from llm_xlsx_parser.services.record_formatter import format_as_records, rows_to_csv
from llm_xlsx_parser.services.spreadsheet_reader import (
    SpreadsheetReader,
    SpreadsheetReadOptions,
)
from llm_xlsx_parser.services.value_validator import (
    LOS_CHECKS,
    SeriesValidation,
    ValidationReport,
    extract_series,
    validate_analysis,
    validate_series,
)
from llm_xlsx_parser.services.xlsx_converter import ViewportOptions, XlsxConverter

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "LOS_CHECKS",
    "AnalysisOptions",
    "AnalysisResult",
    "SeriesValidation",
    "SpreadsheetAnalyzer",
    "SpreadsheetReadOptions",
    "SpreadsheetReader",
    "ValidationReport",
    "ViewportOptions",
    "XlsxConverter",
    "extract_series",
    "format_as_records",
    "rows_to_csv",
    "validate_analysis",
    "validate_series",
]
