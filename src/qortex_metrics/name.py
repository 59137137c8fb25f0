"""Validated metric names, name suffixes and label names.

Two entry points per type, sharing one grammar:

    Name.of("http_requests")      — raising; use for literals known up front
    Name.parse(computed_text)     — returns Name | ValidationError

`Name("...")` is the same as `Name.of("...")`. The opt-in lint step in
qortex_metrics.lint checks literal calls before the code ever runs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from qortex_metrics.errors import ValidationError

NAME_PATTERN = "([a-zA-Z_:][a-zA-Z0-9_:]*)"
SUFFIX_PATTERN = "([a-zA-Z0-9_:]*)"

_NAME_RE = re.compile(NAME_PATTERN)
_SUFFIX_RE = re.compile(SUFFIX_PATTERN)


def _check(text: str, regex: re.Pattern[str], pattern: str) -> ValidationError | None:
    if not isinstance(text, str) or regex.fullmatch(text) is None:
        return ValidationError(
            f"Input String - {text} does not match regex - {pattern}",
            value=text,
        )
    return None


@dataclass(frozen=True, order=True)
class Name:
    """A metric or label name matching ``[a-zA-Z_:][a-zA-Z0-9_:]*``.

    Ordered and compared by the underlying text. ``+`` concatenates two
    names (associative), ``suffix()`` extends a name with a Suffix.
    """

    value: str

    def __post_init__(self) -> None:
        err = _check(self.value, _NAME_RE, NAME_PATTERN)
        if err is not None:
            raise err

    @classmethod
    def of(cls, text: str) -> Name:
        return cls(text)

    @classmethod
    def parse(cls, text: str) -> Name | ValidationError:
        err = _check(text, _NAME_RE, NAME_PATTERN)
        if err is not None:
            return err
        return cls(text)

    def __add__(self, other: Name) -> Name:
        if not isinstance(other, Name):
            return NotImplemented
        return Name(self.value + other.value)

    def suffix(self, s: Suffix) -> Name:
        return Name(self.value + s.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Suffix:
    """A name fragment matching ``[a-zA-Z0-9_:]*``. May be empty."""

    value: str

    def __post_init__(self) -> None:
        err = _check(self.value, _SUFFIX_RE, SUFFIX_PATTERN)
        if err is not None:
            raise err

    @classmethod
    def of(cls, text: str) -> Suffix:
        return cls(text)

    @classmethod
    def parse(cls, text: str) -> Suffix | ValidationError:
        err = _check(text, _SUFFIX_RE, SUFFIX_PATTERN)
        if err is not None:
            return err
        return cls(text)

    def __add__(self, other: Suffix) -> Suffix:
        if not isinstance(other, Suffix):
            return NotImplemented
        return Suffix(self.value + other.value)

    def __str__(self) -> str:
        return self.value


# A label dimension is named by a plain Name.
Label = Name


def require_name(name: object, what: str = "name") -> Name:
    """Reject raw strings where a pre-validated Name is expected."""
    if not isinstance(name, Name):
        raise TypeError(
            f"{what} must be a Name, got {type(name).__name__}. "
            f"Use Name.of() or Name.parse() to validate it first."
        )
    return name
