"""Label-arity binding shared by every labelled metric family.

A LabelBinder pairs N label names with an extractor ``A -> N strings``.
values(a) is called on every ``label(a)``: it runs the extractor once and
fails fast with ArityMismatchError when the count is not N. An extractor
returning a bare ``str`` produces one value, not one per character. Values are
handed to the backend positionally: position i of the label names pairs
with position i of the extracted values, never re-sorted.

Passing ``sample=`` to a labelled constructor runs the same check once at
construction, before anything is registered.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from qortex_metrics.errors import ArityMismatchError, ValidationError
from qortex_metrics.logging import get_logger
from qortex_metrics.name import Label, Name, require_name

A = TypeVar("A")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class LabelBinder(Generic[A]):
    __slots__ = ("name", "labels", "label_names", "arity", "extract")

    def __init__(
        self,
        name: Name,
        labels: Sequence[Label],
        extract: Callable[[A], Sequence[str]],
    ) -> None:
        self.name = require_name(name)
        self.labels: tuple[Label, ...] = tuple(require_name(lbl, "label") for lbl in labels)
        if not self.labels:
            raise ValidationError(
                f"Labelled metric {name.value!r} needs at least one label; "
                f"use no_labels() for a metric without labels",
                value=(),
                field="labels",
            )
        if not callable(extract):
            raise TypeError(f"extract must be callable, got {type(extract).__name__}")
        self.label_names: tuple[str, ...] = tuple(lbl.value for lbl in self.labels)
        self.arity = len(self.labels)
        self.extract = extract

    def values(self, a: A) -> tuple[str, ...]:
        raw = self.extract(a)
        if isinstance(raw, (str, bytes)):
            # a bare string is one value, never a sequence of characters
            raw = (raw,)
        values = tuple(raw)
        if len(values) != self.arity:
            get_logger(__name__).warning(
                "metrics.label.arity_mismatch",
                name=self.name.value,
                expected=self.arity,
                actual=len(values),
            )
            raise ArityMismatchError(self.name.value, self.arity, len(values))
        return values

    def check_sample(self, sample: Any) -> None:
        if sample is not UNSET:
            self.values(sample)

    def __repr__(self) -> str:
        return f"LabelBinder({self.name.value!r}, labels={list(self.label_names)})"


def prepare(
    name: Name,
    labels: Sequence[Label],
    extract: Callable[[A], Sequence[str]],
    sample: Any = UNSET,
) -> LabelBinder[A]:
    """Build a binder and, when a sample is given, prove its arity up front."""
    binder = LabelBinder(name, labels, extract)
    binder.check_sample(sample)
    return binder
