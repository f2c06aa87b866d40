"""Dataclasses representing editor document state and change notifications."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class SelectionRange:
    """Represents the current selection inside the editor widget."""

    start: int = 0
    end: int = 0


@dataclass(slots=True, frozen=True)
class TextChange:
    """A text-change notification: ``removed`` chars at ``start`` replaced by ``inserted``."""

    start: int
    removed: int
    inserted: str

    @property
    def old_range(self) -> tuple[int, int]:
        return (self.start, self.start + self.removed)

    @property
    def new_range(self) -> tuple[int, int]:
        return (self.start, self.start + len(self.inserted))


@dataclass(slots=True)
class DocumentState:
    """Text, selection and dirty flag of the document shown by the editor."""

    text: str = ""
    selection: SelectionRange = field(default_factory=SelectionRange)
    dirty: bool = False
    version_id: int = 1

    def update_text(self, new_text: str) -> None:
        """Update the document text and mark it dirty."""

        self.text = new_text
        self.dirty = True
        self.version_id += 1
