"""
Validation Package

Declarative per-field request validation with bilingual error messages.
"""

from gatehouse.validation.rules import NamedRule, to_number
from gatehouse.validation.schema import FieldRule, ValidationSchema
from gatehouse.validation.schemas import (
    LOGIN_SCHEMA,
    PASSWORD_CHANGE_SCHEMA,
    POST_SCHEMA,
    USER_SCHEMA,
)
from gatehouse.validation.validator import (
    ValidationIssue,
    ValidationResult,
    is_blank,
    merge_sources,
    validate,
)

__all__ = [
    "NamedRule",
    "to_number",
    "FieldRule",
    "ValidationSchema",
    "ValidationIssue",
    "ValidationResult",
    "is_blank",
    "merge_sources",
    "validate",
    "LOGIN_SCHEMA",
    "USER_SCHEMA",
    "PASSWORD_CHANGE_SCHEMA",
    "POST_SCHEMA",
]
