"""Turn unified diff text into files, hunks and numbered lines."""

from __future__ import annotations

from typing import List

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError
from unidiff.patch import Hunk, Line, PatchedFile

from ai_code_reviewer.logger import get_logger
from ai_code_reviewer.models.diff import (
    DELETED_FILE_PATH,
    DiffFile,
    DiffHunk,
    DiffLine,
    HunkHeader,
    LineKind,
)

logger = get_logger()


class DiffParseError(ValueError):
    """Raised when diff text is present but is not a valid unified diff."""


def _strip_line_ending(value: str) -> str:
    if value.endswith("\r\n"):
        return value[:-2]
    if value.endswith("\n"):
        return value[:-1]
    return value


def _line_kind(line: Line) -> LineKind | None:
    if line.is_added:
        return "addition"
    if line.is_removed:
        return "deletion"
    if line.is_context:
        return "context"
    # "No newline at end of file" markers carry no reviewable content.
    return None


def _convert_line(line: Line) -> DiffLine | None:
    kind = _line_kind(line)
    if kind is None:
        return None
    # unidiff leaves the number of the side a line does not exist on as None.
    return DiffLine(
        kind=kind,
        content=_strip_line_ending(line.value),
        old_line_number=line.source_line_no,
        new_line_number=line.target_line_no,
    )


def _convert_hunk(hunk: Hunk) -> DiffHunk:
    header = HunkHeader(
        old_start=hunk.source_start,
        old_length=hunk.source_length,
        new_start=hunk.target_start,
        new_length=hunk.target_length,
        section=(hunk.section_header or "").strip(),
    )
    lines = tuple(converted for converted in map(_convert_line, hunk) if converted is not None)
    return DiffHunk(header=header, lines=lines)


def _convert_file(patched_file: PatchedFile) -> DiffFile:
    path = DELETED_FILE_PATH if patched_file.is_removed_file else patched_file.path
    return DiffFile(path=path, hunks=tuple(_convert_hunk(hunk) for hunk in patched_file))


def parse_diff(diff_text: str | None) -> List[DiffFile] | None:
    """Parse unified diff text.

    Returns ``None`` when there is nothing to review (empty or whitespace-only
    text) and raises :class:`DiffParseError` when the text cannot be parsed.
    The result is a pure function of the input.
    """

    if diff_text is None or not diff_text.strip():
        return None

    try:
        # PatchSet splits a str on "\n" only, so form feeds and U+2028 stay inside their line.
        patch = PatchSet(diff_text)
    except UnidiffParseError as exc:
        raise DiffParseError(f"Unable to parse unified diff: {exc}") from exc

    files = [_convert_file(patched_file) for patched_file in patch]
    logger.debug(
        f"Parsed diff into {len(files)} file(s) and "
        f"{sum(len(file.hunks) for file in files)} hunk(s)"
    )
    return files
