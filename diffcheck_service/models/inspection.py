"""Inspection results for a single commit."""

from dataclasses import dataclass


@dataclass(frozen=True)
class InspectionWarning:
    """A single finding reported by the inspection engine."""

    description: str
    category: str
    line: int


@dataclass(frozen=True)
class InspectionReport:
    """Verdict for one commit's diff."""

    passed: bool
    warnings: tuple[InspectionWarning, ...] = ()

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.passed and self.warnings:
            raise ValueError("a passing report cannot carry warnings")

    @classmethod
    def clean(cls) -> "InspectionReport":
        """A passing report with nothing to say."""
        return cls(passed=True)
