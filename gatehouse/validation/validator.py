"""
Validator - applies a ValidationSchema to a request record.

For each field, in schema order:
1. required and blank      -> required error, stop checking this field
2. optional and blank      -> skip the field
3. type=number, not numeric -> type error, stop
4. type=string, not a str   -> type error, stop
5. min_length / max_length (independent)
6. min / max (independent)
7. pattern
8. custom predicate
9. named rule

Errors keep field order, then check order within a field.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from gatehouse.validation.rules import to_number
from gatehouse.validation.schema import FieldRule, ValidationSchema


@dataclass(frozen=True)
class ValidationIssue:
    """One failed check on one field."""

    field: str
    message: str
    message_th: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "messageTH": self.message_th}


@dataclass
class ValidationResult:
    """
    Outcome of validating one record.

    Attributes:
        valid: True iff no errors were found
        errors: Issues in field-declaration then check order
        data: The merged record that was validated
    """

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    def error_dicts(self) -> list[dict[str, str]]:
        return [issue.to_dict() for issue in self.errors]


def merge_sources(*sources: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Merge body, query and path params; later sources win on collisions."""
    merged: dict[str, Any] = {}
    for source in sources:
        if source:
            merged.update(source)
    return merged


def is_blank(value: Any) -> bool:
    """Absent, None, whitespace-only strings and empty collections are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def _check_field(name: str, rule: FieldRule, value: Any, record: Mapping[str, Any]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    def fail(message: str, message_th: str) -> None:
        issues.append(ValidationIssue(name, message, message_th))

    if is_blank(value):
        if rule.required:
            fail(f"{name} is required", f"กรุณากรอก {name}")
        return issues

    if rule.type == "number" and to_number(value) is None:
        fail(f"{name} must be a number", f"{name} ต้องเป็นตัวเลข")
        return issues

    if rule.type == "string" and not isinstance(value, str):
        fail(f"{name} must be a string", f"{name} ต้องเป็นข้อความ")
        return issues

    text = str(value)
    if rule.min_length is not None and len(text) < rule.min_length:
        fail(
            f"{name} must be at least {rule.min_length} characters",
            f"{name} ต้องมีความยาวอย่างน้อย {rule.min_length} ตัวอักษร",
        )
    if rule.max_length is not None and len(text) > rule.max_length:
        fail(
            f"{name} must not exceed {rule.max_length} characters",
            f"{name} ต้องมีความยาวไม่เกิน {rule.max_length} ตัวอักษร",
        )

    number = to_number(value)
    if rule.min is not None and number is not None and number < rule.min:
        fail(f"{name} must be at least {_fmt(rule.min)}", f"{name} ต้องมีค่าอย่างน้อย {_fmt(rule.min)}")
    if rule.max is not None and number is not None and number > rule.max:
        fail(f"{name} must not exceed {_fmt(rule.max)}", f"{name} ต้องมีค่าไม่เกิน {_fmt(rule.max)}")

    if rule.pattern is not None and not rule.pattern.search(text):
        fail(
            rule.pattern_message or f"{name} format is invalid",
            rule.pattern_message_th or f"รูปแบบ {name} ไม่ถูกต้อง",
        )

    if rule.custom is not None:
        outcome = rule.custom(value, record)
        if outcome is not True:
            message = outcome if isinstance(outcome, str) else f"{name} is invalid"
            fail(message, message)

    if rule.rule is not None and not rule.rule.matches(value):
        fail(f"Invalid {name}", rule.rule.message_th)

    return issues


def validate(schema: ValidationSchema, record: Mapping[str, Any]) -> ValidationResult:
    """
    Validate a record against a schema.

    Args:
        schema: Field rules in declaration order
        record: Merged request record

    Returns:
        ValidationResult; ``valid`` is True iff ``errors`` is empty
    """
    data = dict(record)
    errors: list[ValidationIssue] = []
    for name, rule in schema.items():
        errors.extend(_check_field(name, rule, data.get(name), data))
    return ValidationResult(valid=not errors, errors=errors, data=data)
