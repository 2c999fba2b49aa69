"""LLM XLSX Parser - spreadsheets rendered as images, records and CSV for LLMs."""

from llm_xlsx_parser.services.analyzer import SpreadsheetAnalyzer
from llm_xlsx_parser.services.xlsx_converter import XlsxConverter

__all__ = ["SpreadsheetAnalyzer", "XlsxConverter"]
__version__ = "0.1.0"


def main() -> None:
    """Run the command-line interface."""
    from llm_xlsx_parser.cli import app

    app()
