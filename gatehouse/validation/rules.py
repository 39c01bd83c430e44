"""
Named Validation Rules

A closed set of reusable field rules. Each NamedRule member is bound to a
matcher and a Thai error message in ``_RULES``; the module refuses to import
if any member is missing from that table.
"""

import math
import re
from enum import Enum
from typing import Any, Callable, NamedTuple, Optional


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+\Z")
# Thai mobile numbers: +66 / 66 / 0 prefix, then 6, 8 or 9, then 8 digits
PHONE_RE = re.compile(r"^(\+66|66|0)(6|8|9)\d{8}\Z")
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}\Z")
THAI_TEXT_RE = re.compile(r"^[ก-๙\s]+\Z")


def to_number(value: Any) -> Optional[float]:
    """
    Parse a numeric value.

    Accepts ints, floats and numeric strings; booleans, NaN and infinities
    are not numbers.

    Returns:
        The value as a float, or None if it is not numeric
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        if "_" in value:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _is_email(value: Any) -> bool:
    return bool(EMAIL_RE.match(str(value)))


def _is_phone_number(value: Any) -> bool:
    digits = re.sub(r"[-\s]", "", str(value))
    return bool(PHONE_RE.match(digits))


def _is_strong_password(value: Any) -> bool:
    return bool(STRONG_PASSWORD_RE.match(str(value)))


def _is_thai_text(value: Any) -> bool:
    return bool(THAI_TEXT_RE.match(str(value)))


def _is_positive_number(value: Any) -> bool:
    number = to_number(value)
    return number is not None and number > 0


def _is_age(value: Any) -> bool:
    number = to_number(value)
    if number is None:
        return False
    return 0 <= int(number) <= 150


class NamedRule(str, Enum):
    """Rules a schema can reference by name."""

    EMAIL = "email"
    PHONE_NUMBER = "phoneNumber"
    STRONG_PASSWORD = "strongPassword"
    THAI_TEXT = "thaiText"
    POSITIVE_NUMBER = "positiveNumber"
    AGE = "age"

    def matches(self, value: Any) -> bool:
        return _RULES[self].matcher(value)

    @property
    def message_th(self) -> str:
        return _RULES[self].message_th


class _RuleSpec(NamedTuple):
    matcher: Callable[[Any], bool]
    message_th: str


_RULES: dict[NamedRule, _RuleSpec] = {
    NamedRule.EMAIL: _RuleSpec(_is_email, "รูปแบบอีเมลไม่ถูกต้อง"),
    NamedRule.PHONE_NUMBER: _RuleSpec(_is_phone_number, "รูปแบบเบอร์โทรไม่ถูกต้อง"),
    NamedRule.STRONG_PASSWORD: _RuleSpec(
        _is_strong_password,
        "รหัสผ่านต้องมีอย่างน้อย 8 ตัวอักษร และมีตัวพิมพ์ใหญ่ ตัวพิมพ์เล็ก และตัวเลข",
    ),
    NamedRule.THAI_TEXT: _RuleSpec(_is_thai_text, "ต้องเป็นข้อความภาษาไทยเท่านั้น"),
    NamedRule.POSITIVE_NUMBER: _RuleSpec(_is_positive_number, "ต้องเป็นตัวเลขที่มากกว่าศูนย์"),
    NamedRule.AGE: _RuleSpec(_is_age, "อายุต้องอยู่ระหว่าง 0-150 ปี"),
}

_missing = set(NamedRule) - set(_RULES)
if _missing:
    raise RuntimeError(f"NamedRule members without a matcher: {sorted(m.value for m in _missing)}")
