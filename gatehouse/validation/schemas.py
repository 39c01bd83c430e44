"""
Predefined Validation Schemas

Schemas used by the built-in routes.
"""

from typing import Any, Mapping

from gatehouse.validation.rules import NamedRule
from gatehouse.validation.schema import FieldRule, ValidationSchema


POST_CATEGORIES = ("tech", "lifestyle", "education", "news")


def _matches_new_password(value: Any, record: Mapping[str, Any]) -> Any:
    if value != record.get("newPassword"):
        return "รหัสผ่านใหม่และยืนยันรหัสผ่านไม่ตรงกัน"
    return True


def _is_post_category(value: Any, record: Mapping[str, Any]) -> Any:
    if value not in POST_CATEGORIES:
        return f"หมวดหมู่ต้องเป็น: {', '.join(POST_CATEGORIES)}"
    return True


LOGIN_SCHEMA = ValidationSchema({
    "username": FieldRule(required=True, type="string", min_length=3, max_length=50),
    "password": FieldRule(required=True, type="string", min_length=6),
})

USER_SCHEMA = ValidationSchema({
    "name": FieldRule(required=True, type="string", min_length=2, max_length=100),
    "email": FieldRule(required=True, type="string", rule=NamedRule.EMAIL),
    "age": FieldRule(type="number", rule=NamedRule.AGE),
    "phone": FieldRule(type="string", rule=NamedRule.PHONE_NUMBER),
})

PASSWORD_CHANGE_SCHEMA = ValidationSchema({
    "currentPassword": FieldRule(required=True, type="string"),
    "newPassword": FieldRule(required=True, type="string", rule=NamedRule.STRONG_PASSWORD),
    "confirmPassword": FieldRule(required=True, type="string", custom=_matches_new_password),
})

POST_SCHEMA = ValidationSchema({
    "title": FieldRule(required=True, type="string", min_length=5, max_length=100),
    "content": FieldRule(required=True, type="string", min_length=10),
    "category": FieldRule(required=True, type="string", custom=_is_post_category),
})
