#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Sample Reports
===============

Key/value annotations that travel with a spectrum through every
transform (sample id, format, reference values, intercept/slope of a
scatter correction, ...). The filters never inspect them except where a
filter explicitly reads or writes a named field.

Values are a small tagged union::

    BoolValue(True) | NumberValue(1.5) | TextValue("NIR")

so callers never cast an untyped object back to its real type.

Usage:
------
    >>> report = Report()
    >>> report.set_numeric_value('Protein', 12.4)
    >>> report.get_value('Protein')
    12.4
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class DataType(Enum):
    """Declared type of a report field."""
    BOOLEAN = 'B'
    NUMERIC = 'N'
    STRING = 'S'
    UNKNOWN = 'U'


@dataclass(frozen=True)
class Field:
    """A named, typed slot in a report."""
    name: str
    data_type: DataType = DataType.STRING

    def __str__(self) -> str:
        return f"{self.name}[{self.data_type.value}]"


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class TextValue:
    value: str


FieldValue = Union[BoolValue, NumberValue, TextValue]


def make_value(data_type: DataType, raw: Any) -> FieldValue:
    """
    Wrap a raw Python value in the tagged value matching ``data_type``.

    Raises
    ------
    ValueError
        For ``DataType.UNKNOWN`` or any data type without a value variant,
        and for numeric values that cannot be converted.
    """
    if data_type is DataType.BOOLEAN:
        if isinstance(raw, str):
            return BoolValue(raw.strip().lower() in ('true', 'yes', '1'))
        return BoolValue(bool(raw))
    if data_type is DataType.NUMERIC:
        try:
            return NumberValue(float(raw))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Not a numeric value: {raw!r}") from e
    if data_type is DataType.STRING:
        return TextValue(str(raw))
    raise ValueError(f"Unhandled data type: {data_type}")


class Report:
    """
    Mutable collection of typed field values.

    Fields are addressed either by ``Field`` or by name; lookups by name
    match whichever field of that name is present.
    """

    FORMAT = Field('Format', DataType.STRING)
    DEFAULT_FORMAT = 'NIR'

    def __init__(self, report_id: str = ''):
        self.id = report_id
        self._values: Dict[Field, FieldValue] = {}

    def _resolve(self, field: Union[Field, str]) -> Optional[Field]:
        if isinstance(field, Field):
            return field if field in self._values else None
        for f in self._values:
            if f.name == field:
                return f
        return None

    def set_value(self, field: Field, raw: Any):
        """Store ``raw`` under ``field``, replacing any field of the same name."""
        existing = self._resolve(field.name)
        if existing is not None:
            del self._values[existing]
        self._values[field] = make_value(field.data_type, raw)

    def set_numeric_value(self, name: str, value: float):
        self.set_value(Field(name, DataType.NUMERIC), value)

    def set_string_value(self, name: str, value: str):
        self.set_value(Field(name, DataType.STRING), value)

    def set_boolean_value(self, name: str, value: bool):
        self.set_value(Field(name, DataType.BOOLEAN), value)

    def has_value(self, field: Union[Field, str]) -> bool:
        return self._resolve(field) is not None

    def get_field_value(self, field: Union[Field, str]) -> Optional[FieldValue]:
        """Return the tagged value, or None if the field is absent."""
        resolved = self._resolve(field)
        if resolved is None:
            return None
        return self._values[resolved]

    def get_value(self, field: Union[Field, str]) -> Any:
        """Return the plain Python value, or None if the field is absent."""
        value = self.get_field_value(field)
        if value is None:
            return None
        return value.value

    def remove_value(self, field: Union[Field, str]) -> bool:
        resolved = self._resolve(field)
        if resolved is None:
            return False
        del self._values[resolved]
        return True

    def fields(self) -> List[Field]:
        return list(self._values)

    def merge_with(self, other: 'Report'):
        """Copy over all fields of ``other`` not present here (existing values win)."""
        for field, value in other._values.items():
            if self._resolve(field.name) is None:
                self._values[field] = value

    def clone(self) -> 'Report':
        result = Report(self.id)
        result._values = dict(self._values)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: v.value for f, v in self._values.items()}

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Report):
            return False
        return self.id == other.id and self._values == other._values

    def __repr__(self) -> str:
        return f"Report(id={self.id!r}, fields={len(self._values)})"
