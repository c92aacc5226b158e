"""Structured view of a unified diff."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

DELETED_FILE_PATH = "/dev/null"

LineKind = Literal["context", "addition", "deletion"]


@dataclass(frozen=True, slots=True)
class DiffLine:
    kind: LineKind
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None

    @property
    def prefix(self) -> str:
        if self.kind == "addition":
            return "+"
        if self.kind == "deletion":
            return "-"
        return " "

    @property
    def anchor_line_number(self) -> int | None:
        """Line number the reviewer sees next to this line in the prompt."""
        if self.kind == "deletion":
            return self.old_line_number
        return self.new_line_number


@dataclass(frozen=True, slots=True)
class HunkHeader:
    old_start: int
    old_length: int
    new_start: int
    new_length: int
    section: str = ""

    def __str__(self) -> str:
        header = f"@@ -{self.old_start},{self.old_length} +{self.new_start},{self.new_length} @@"
        if self.section:
            header = f"{header} {self.section}"
        return header


@dataclass(frozen=True, slots=True)
class DiffHunk:
    header: HunkHeader
    lines: Tuple[DiffLine, ...] = ()

    @property
    def new_line_numbers(self) -> frozenset[int]:
        """New-file line numbers a comment can be anchored to."""
        return frozenset(
            line.new_line_number for line in self.lines if line.new_line_number is not None
        )


@dataclass(frozen=True, slots=True)
class DiffFile:
    path: str
    hunks: Tuple[DiffHunk, ...] = ()

    @property
    def is_deleted(self) -> bool:
        return self.path == DELETED_FILE_PATH

    @property
    def is_reviewable(self) -> bool:
        """Deleted files and files without hunks are never sent for review."""
        return not self.is_deleted and bool(self.hunks)

    @property
    def comment_path(self) -> str:
        """Path used to anchor comments; empty when the file no longer exists."""
        return "" if self.is_deleted else self.path
