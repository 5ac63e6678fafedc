"""
Actuals: data-quality validation and forecast-vs-actual merging.
"""

from .validators import ValidationResult, validate_actuals
from .merge import merge_and_compare

__all__ = [
    "ValidationResult",
    "validate_actuals",
    "merge_and_compare",
]
