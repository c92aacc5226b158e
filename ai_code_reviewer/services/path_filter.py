"""Drop files whose path matches a configured exclusion glob."""

from __future__ import annotations

import fnmatch
from typing import Iterable, List, Sequence

from ai_code_reviewer.logger import get_logger
from ai_code_reviewer.models.diff import DiffFile

logger = get_logger()


def _split_alternatives(body: str) -> List[str]:
    """Split a brace body on its top-level commas."""

    parts: List[str] = []
    depth = 0
    current = ""
    for char in body:
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    parts.append(current)
    return parts


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` sets: ``**/*.{ts,js}`` becomes ``**/*.ts`` and ``**/*.js``.

    Nested sets are expanded too. A set without a comma (``{a}``) is literal.
    """

    depth = 0
    start = 0
    for index, char in enumerate(pattern):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth:
                continue
            alternatives = _split_alternatives(pattern[start + 1:index])
            if len(alternatives) < 2:
                continue
            prefix, suffix = pattern[:start], pattern[index + 1:]
            expanded: List[str] = []
            for alternative in alternatives:
                expanded.extend(expand_braces(prefix + alternative + suffix))
            return expanded
    return [pattern]


def _is_hidden(segment: str) -> bool:
    return segment.startswith(".")


def _match_segments(path_parts: Sequence[str], pattern_parts: Sequence[str]) -> bool:
    """Match path segments against pattern segments; ``**`` spans zero or more segments.

    Like minimatch without ``dot``, wildcards never match a segment starting
    with ``.``; only a pattern segment that itself starts with ``.`` does.
    """

    if not pattern_parts:
        return not path_parts

    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        for index in range(len(path_parts) + 1):
            if _match_segments(path_parts[index:], rest):
                return True
            if index < len(path_parts) and _is_hidden(path_parts[index]):
                return False
        return False

    if not path_parts:
        return False
    if _is_hidden(path_parts[0]) and not _is_hidden(head):
        return False
    if not fnmatch.fnmatchcase(path_parts[0], head):
        return False
    return _match_segments(path_parts[1:], rest)


def matches_pattern(path: str, pattern: str) -> bool:
    """Return True when ``path`` matches the glob ``pattern``.

    ``*`` and ``?`` never cross a ``/``; use ``**`` for recursive matches
    (``**/*.md``, ``docs/**``). Brace sets expand first. An empty pattern
    only matches an empty path.
    """

    path_parts = path.split("/")
    return any(
        _match_segments(path_parts, alternative.split("/")) for alternative in expand_braces(pattern)
    )


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(path, pattern) for pattern in patterns)


def filter_files(files: Sequence[DiffFile], patterns: Sequence[str]) -> List[DiffFile]:
    """Remove every file matching any pattern, with all of its hunks.

    Deleted files are matched with an empty path, so only an empty or
    catch-all (``**``) pattern can exclude them.
    """

    kept: List[DiffFile] = []
    for file in files:
        if is_excluded(file.comment_path, patterns):
            logger.debug(f"Excluding {file.path or '<empty path>'} from review")
            continue
        kept.append(file)

    if len(kept) != len(files):
        logger.info(f"Excluded {len(files) - len(kept)} of {len(files)} file(s) by pattern")
    return kept
