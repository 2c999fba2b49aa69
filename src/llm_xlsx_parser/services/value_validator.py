"""Check numbers extracted from an analysis against known ground truth."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from llm_xlsx_parser.utils.logging import get_logger

logger = get_logger(__name__)

_LEADING_NUMBER = re.compile(r"\d*\.?\d*")


@dataclass(frozen=True)
class SeriesCheck:
    """A named numeric series to pull out of analysis text."""

    name: str
    pattern: re.Pattern[str]
    expected: tuple[float, ...]
    tolerance: float


@dataclass
class ValueComparison:
    index: int
    expected: float
    actual: float
    passed: bool


@dataclass
class SeriesValidation:
    """Comparison of one extracted series with its expected values."""

    name: str
    expected_count: int
    actual_count: int
    tolerance: float
    comparisons: list[ValueComparison] = field(default_factory=list)

    @property
    def count_matches(self) -> bool:
        return self.expected_count == self.actual_count

    @property
    def passed(self) -> bool:
        return self.count_matches and all(c.passed for c in self.comparisons)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "expected_count": self.expected_count,
            "actual_count": self.actual_count,
            "tolerance": self.tolerance,
            "passed": self.passed,
            "comparisons": [
                {
                    "period": c.index + 1,
                    "expected": c.expected,
                    "actual": c.actual,
                    "passed": c.passed,
                }
                for c in self.comparisons
            ],
        }


@dataclass
class ValidationReport:
    series: list[SeriesValidation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.series)

    def failed_series(self) -> list[str]:
        return [result.name for result in self.series if not result.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "series": [result.to_dict() for result in self.series],
        }


def _parse_number(text: str) -> float | None:
    # Leading numeric prefix only, so "3.60." and "12.5.1" still parse.
    match = _LEADING_NUMBER.match(text)
    if match is None or not match.group(0).strip("."):
        return None
    return float(match.group(0).rstrip("."))


def extract_series(text: str, pattern: re.Pattern[str] | str) -> list[float]:
    """Collect capture group 1 of every match of ``pattern`` as floats."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    values: list[float] = []
    for match in regex.finditer(text):
        value = _parse_number(match.group(1))
        if value is not None:
            values.append(value)
    return values


def validate_series(
    name: str,
    expected: list[float] | tuple[float, ...],
    actual: list[float],
    tolerance: float,
) -> SeriesValidation:
    """Compare values position by position within ``tolerance``.

    A count mismatch fails the series and no per-value rows are produced.
    """
    result = SeriesValidation(
        name=name,
        expected_count=len(expected),
        actual_count=len(actual),
        tolerance=tolerance,
    )
    if not result.count_matches:
        logger.warning(
            "Series length mismatch",
            series=name,
            expected=len(expected),
            actual=len(actual),
        )
        return result

    for index, (expected_value, actual_value) in enumerate(
        zip(expected, actual, strict=True)
    ):
        result.comparisons.append(
            ValueComparison(
                index=index,
                expected=expected_value,
                actual=actual_value,
                passed=abs(actual_value - expected_value) <= tolerance,
            )
        )
    return result


def validate_analysis(
    text: str, checks: tuple[SeriesCheck, ...] | list[SeriesCheck]
) -> ValidationReport:
    """Run every check against one analysis text."""
    report = ValidationReport()
    for check in checks:
        actual = extract_series(text, check.pattern)
        report.series.append(
            validate_series(check.name, check.expected, actual, check.tolerance)
        )
    logger.info(
        "Validated analysis",
        series=len(report.series),
        passed=report.passed,
    )
    return report


GAS_PRICE_PATTERN = re.compile(r"PRICES:\s*Gas\s*\([^)]+\):\s*([\d.]+)")
WORKING_INTEREST_PATTERN = re.compile(r"NET TO WI:\s*([\d.]+)")

# Ground truth for the bundled lease operating statement (LOS) workbook.
LOS_CHECKS: tuple[SeriesCheck, ...] = (
    SeriesCheck(
        name="gas_prices",
        pattern=GAS_PRICE_PATTERN,
        expected=(
            6.73, 8.46, 9.17, 15.8, 11.26, 2.98, 3.6,
            3.68, 3.56, 1.59, 1.98, 2.47, 3.79,
        ),
        tolerance=0.01,
    ),
    SeriesCheck(
        name="working_interest",
        pattern=WORKING_INTEREST_PATTERN,
        expected=(
            1492932, 1855968, 1843238, 2882928, 1730478, 453757, 597380,
            647432, 809220, 393202, 157421, 377842, 696481,
        ),
        tolerance=1,
    ),
)
