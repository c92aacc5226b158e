"""Anchor model suggestions to file/line coordinates."""

from __future__ import annotations

from typing import List, Sequence

from ai_code_reviewer.logger import get_logger, log_with_context
from ai_code_reviewer.models.diff import DiffFile, DiffHunk
from ai_code_reviewer.models.review import ReviewComment, Suggestion

logger = get_logger()


def coerce_line_number(raw: str) -> int:
    """Convert a model-supplied line number to an int; unusable values become 0."""

    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    if not number.is_integer():
        return 0
    return int(number)


def map_comments(
    file: DiffFile,
    hunk: DiffHunk,
    suggestions: Sequence[Suggestion],
    *,
    restrict_to_diff: bool = False,
) -> List[ReviewComment]:
    """Pair each suggestion with the file path and its numeric line.

    Lines that are not positive are kept here and dropped before submission.
    Lines outside the hunk's new-file lines are logged, and dropped only when
    ``restrict_to_diff`` is set.
    """

    path = file.comment_path
    if not path:
        return []

    ctx_logger = log_with_context(logger, path=path, hunk=str(hunk.header))
    anchorable = hunk.new_line_numbers
    comments: List[ReviewComment] = []
    for suggestion in suggestions:
        line = coerce_line_number(suggestion.line_number)
        if line > 0 and line not in anchorable:
            if restrict_to_diff:
                ctx_logger.warning(f"Dropping suggestion for line {line}: outside the reviewed hunk")
                continue
            ctx_logger.warning(f"Suggestion for line {line} is outside the reviewed hunk")
        ctx_logger.info(f"Creating comment for file: {path}, line: {suggestion.line_number}")
        comments.append(ReviewComment(path=path, line=line, body=suggestion.review_comment))
    return comments
