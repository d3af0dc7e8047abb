"""
errors.py — Configuration Errors
==================================
Invalid problem parameters are rejected at the boundary, before any
search or recursion starts.  Generators never raise mid-algorithm:
"no solution" and "target not present" are normal terminal Steps.
"""

from typing import Optional


class ConfigurationError(ValueError):
    """
    Attributes:
        field : Name of the offending parameter (or None when the error
                concerns the request as a whole, e.g. an unknown algorithm).
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {"error": str(self), "field": self.field}
