"""
Character-offset text edits.

A change set is a list of :class:`StringInsertion` and :class:`StringDeletion`
values whose offsets all refer to the same, unmodified source string.
:func:`apply_changes_to_string` applies them together, so the order in which
the changes were collected does not matter.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Sequence, Union

__all__ = [
    "ChangeType",
    "StringInsertion",
    "StringDeletion",
    "StringChange",
    "apply_changes_to_string",
]


class ChangeType(enum.Enum):
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class StringInsertion:
    index: int
    text: str
    type: ChangeType = ChangeType.INSERT


@dataclass(frozen=True)
class StringDeletion:
    start: int
    length: int
    type: ChangeType = ChangeType.DELETE


StringChange = Union[StringInsertion, StringDeletion]


def _change_index(change: StringChange) -> int:
    if change.type is ChangeType.INSERT:
        return change.index
    return change.start


def _validate(text: str, changes: Sequence[StringChange]) -> None:
    size = len(text)
    for change in changes:
        if change.type is ChangeType.INSERT:
            if not isinstance(change.index, int) or not 0 <= change.index <= size:
                raise ValueError(
                    f"Invalid insertion index {change.index!r} for text of length {size}"
                )
        else:
            if not isinstance(change.start, int) or not 0 <= change.start <= size:
                raise ValueError(
                    f"Invalid deletion start {change.start!r} for text of length {size}"
                )
            if not isinstance(change.length, int) or change.length < 0:
                raise ValueError(f"Invalid deletion length {change.length!r}")
            if change.start + change.length > size:
                raise ValueError(
                    f"Deletion of {change.length} characters at {change.start} "
                    f"runs past the end of the text ({size})"
                )


def apply_changes_to_string(text: str, changes: Sequence[StringChange]) -> str:
    """Apply a change set to ``text`` and return the new string.

    Changes are ordered by their original offset; at the same offset an
    insertion is applied before a deletion, so a delete/insert pair at one
    position replaces the deleted span with the inserted text.  A running
    offset tracks how far earlier changes have shifted later ones.

    Raises
    ------
    ValueError
        If a change points outside ``text``.
    """
    _validate(text, changes)
    ordered: List[StringChange] = sorted(
        changes,
        key=lambda c: (_change_index(c), 0 if c.type is ChangeType.INSERT else 1),
    )
    offset = 0
    for change in ordered:
        index = _change_index(change) + offset
        if change.type is ChangeType.INSERT:
            text = text[:index] + change.text + text[index:]
            offset += len(change.text)
        else:
            text = text[:index] + text[index + change.length:]
            offset -= change.length
    return text
