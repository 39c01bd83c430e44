"""
Validation Schema Definitions

A ValidationSchema is an ordered mapping from field name to FieldRule.
Schemas are declared once (usually at import time) and shared read-only by
every request.

Example:
    >>> schema = ValidationSchema({
    ...     "email": FieldRule(required=True, type="string", rule=NamedRule.EMAIL),
    ...     "age": FieldRule(type="number", rule="age"),
    ... })
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterator, Literal, Mapping, Optional, Union

from gatehouse.validation.rules import NamedRule


CustomPredicate = Callable[[Any, Mapping[str, Any]], Any]


@dataclass(frozen=True)
class FieldRule:
    """
    Checks applied to one field.

    Attributes:
        required: Blank or absent values are an error (otherwise skipped)
        type: "number" or "string"
        min_length: Minimum string length
        max_length: Maximum string length
        min: Minimum numeric value
        max: Maximum numeric value
        pattern: Regular expression the value must match (search semantics)
        pattern_message: Message when the pattern fails
        pattern_message_th: Thai message when the pattern fails
        custom: ``custom(value, record)``; anything but True is the error message
        rule: A NamedRule (or its name)
    """

    required: bool = False
    type: Optional[Literal["number", "string"]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[Union[str, re.Pattern]] = None
    pattern_message: Optional[str] = None
    pattern_message_th: Optional[str] = None
    custom: Optional[CustomPredicate] = None
    rule: Optional[Union[NamedRule, str]] = None

    def __post_init__(self) -> None:
        if self.type not in (None, "number", "string"):
            raise ValueError(f"Unsupported field type: {self.type!r}")
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        if self.rule is not None and not isinstance(self.rule, NamedRule):
            # Unknown names fail here, at declaration time
            object.__setattr__(self, "rule", NamedRule(self.rule))


class ValidationSchema(Mapping[str, FieldRule]):
    """Immutable, ordered field → FieldRule mapping."""

    def __init__(self, fields: Mapping[str, FieldRule]) -> None:
        for name, rule in fields.items():
            if not isinstance(rule, FieldRule):
                raise TypeError(f"Field {name!r} must map to a FieldRule")
        self._fields = MappingProxyType(dict(fields))

    def __getitem__(self, name: str) -> FieldRule:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ValidationSchema({list(self._fields)})"
