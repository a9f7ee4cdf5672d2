"""Content checks for versions, layouts, internal links and line length."""

from sabresite.checks.validator import ContentValidator, ValidationResult

__all__ = [
    "ContentValidator",
    "ValidationResult",
]
