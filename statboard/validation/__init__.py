from statboard.core.exceptions import InvalidRangeError, ValidationError, ValidationIssue

from .filter_validation import parse_filter_form

__all__ = ["InvalidRangeError", "ValidationError", "ValidationIssue", "parse_filter_form"]
