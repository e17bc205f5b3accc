"""Medical document import: page assessment and structured report extraction."""

from .assess import assess
from .report import NotMedicalInputError, analyze_report

__all__ = ["NotMedicalInputError", "analyze_report", "assess"]
