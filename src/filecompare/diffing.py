"""Line-level diff and similarity statistics.

The edit script comes from the linear-space variant of the Myers O(ND)
algorithm, so the number of unchanged lines is always the length of a longest
common subsequence of the two inputs. The common prefix and suffix of every
box are matched directly, and lines that occur on one side only are set aside
before the search because no common subsequence can contain them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

from .filters import normalize_text, split_lines
from .models import (
    CompareOutcome,
    ComparisonConfig,
    ComparisonStats,
    DiffLine,
    DiffLineType,
    resolve_granularity,
)

RunTag = Literal["equal", "delete", "insert"]


@dataclass(frozen=True, slots=True)
class DiffRun:
    """A maximal block of lines sharing one edit operation."""

    tag: RunTag
    lines: tuple[str, ...]


def whitespace_key(line: str) -> str:
    return " ".join(line.split())


def _split_point(
    a: Sequence[str], a_lo: int, a_hi: int, b: Sequence[str], b_lo: int, b_hi: int
) -> tuple[int, int] | None:
    """Return a point halfway along a shortest edit path through the box.

    Forward and backward searches each keep one array of furthest reaching x
    per diagonal, so memory stays linear in the size of the box. Diagonals
    that leave the box are dropped from later rounds. ``None`` means the two
    ranges have no line in common.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    max_depth = (n + m + 1) // 2
    offset = max_depth
    size = 2 * max_depth
    forward = [-1] * size
    backward = [-1] * size
    forward[offset + 1] = 0
    backward[offset + 1] = 0
    delta = n - m
    odd = delta % 2 != 0
    forward_start = forward_end = backward_start = backward_end = 0

    for depth in range(max_depth):
        for k in range(-depth + forward_start, depth + 1 - forward_end, 2):
            slot = offset + k
            if k == -depth or (k != depth and forward[slot - 1] < forward[slot + 1]):
                x = forward[slot + 1]
            else:
                x = forward[slot - 1] + 1
            y = x - k
            while x < n and y < m and a[a_lo + x] == b[b_lo + y]:
                x += 1
                y += 1
            forward[slot] = x
            if x > n:
                forward_end += 2
            elif y > m:
                forward_start += 2
            elif odd:
                mirror = offset + delta - k
                if 0 <= mirror < size and backward[mirror] != -1 and x >= n - backward[mirror]:
                    return a_lo + x, b_lo + y

        for k in range(-depth + backward_start, depth + 1 - backward_end, 2):
            slot = offset + k
            if k == -depth or (k != depth and backward[slot - 1] < backward[slot + 1]):
                x = backward[slot + 1]
            else:
                x = backward[slot - 1] + 1
            y = x - k
            while x < n and y < m and a[a_hi - 1 - x] == b[b_hi - 1 - y]:
                x += 1
                y += 1
            backward[slot] = x
            if x > n:
                backward_end += 2
            elif y > m:
                backward_start += 2
            elif not odd:
                mirror = offset + delta - k
                if 0 <= mirror < size and forward[mirror] != -1 and forward[mirror] >= n - x:
                    split_x = forward[mirror]
                    return a_lo + split_x, b_lo + split_x - (mirror - offset)

    return None


def _collect_matches(
    a: Sequence[str],
    a_lo: int,
    a_hi: int,
    b: Sequence[str],
    b_lo: int,
    b_hi: int,
    matches: list[tuple[int, int]],
) -> None:
    """Append matched ``(i, j)`` pairs of the box to *matches* in ascending order."""
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        matches.append((a_lo, b_lo))
        a_lo += 1
        b_lo += 1
    a_end, b_end = a_hi, b_hi
    while a_lo < a_end and b_lo < b_end and a[a_end - 1] == b[b_end - 1]:
        a_end -= 1
        b_end -= 1

    if a_lo < a_end and b_lo < b_end:
        split = _split_point(a, a_lo, a_end, b, b_lo, b_end)
        if split is not None:
            x, y = split
            _collect_matches(a, a_lo, x, b, b_lo, y, matches)
            _collect_matches(a, x, a_end, b, y, b_end, matches)

    matches.extend(zip(range(a_end, a_hi), range(b_end, b_hi)))


def _edit_script(a: Sequence[str], b: Sequence[str]) -> list[tuple[RunTag, int]]:
    """Return ``(tag, position)`` pairs; positions index *a* for deletions, *b* otherwise."""
    shared = set(a).intersection(b)
    index_a = [i for i, line in enumerate(a) if line in shared]
    index_b = [j for j, line in enumerate(b) if line in shared]
    matches: list[tuple[int, int]] = []
    _collect_matches(
        [a[i] for i in index_a], 0, len(index_a), [b[j] for j in index_b], 0, len(index_b), matches
    )

    edits: list[tuple[RunTag, int]] = []
    x = y = 0
    for i, j in matches:
        matched_a, matched_b = index_a[i], index_b[j]
        edits.extend(("delete", position) for position in range(x, matched_a))
        edits.extend(("insert", position) for position in range(y, matched_b))
        edits.append(("equal", matched_b))
        x, y = matched_a + 1, matched_b + 1
    edits.extend(("delete", position) for position in range(x, len(a)))
    edits.extend(("insert", position) for position in range(y, len(b)))
    return edits


def diff_lines(
    lines_a: Sequence[str], lines_b: Sequence[str], *, ignore_whitespace: bool = False
) -> list[DiffRun]:
    """Compute the runs turning *lines_a* into *lines_b*.

    With ``ignore_whitespace`` two lines match when they are equal after
    trimming and collapsing internal whitespace; the displayed text is left
    untouched and unchanged lines carry the text of *lines_b*. Inside a change
    block every deletion precedes every insertion.
    """
    if ignore_whitespace:
        keys_a = [whitespace_key(line) for line in lines_a]
        keys_b = [whitespace_key(line) for line in lines_b]
    else:
        keys_a, keys_b = list(lines_a), list(lines_b)

    runs: list[DiffRun] = []
    deleted: list[str] = []
    inserted: list[str] = []
    equal: list[str] = []

    def flush_changes() -> None:
        if deleted:
            runs.append(DiffRun("delete", tuple(deleted)))
            deleted.clear()
        if inserted:
            runs.append(DiffRun("insert", tuple(inserted)))
            inserted.clear()

    for tag, position in _edit_script(keys_a, keys_b):
        if tag == "equal":
            flush_changes()
            equal.append(lines_b[position])
            continue
        if equal:
            runs.append(DiffRun("equal", tuple(equal)))
            equal.clear()
        if tag == "delete":
            deleted.append(lines_a[position])
        else:
            inserted.append(lines_b[position])

    flush_changes()
    if equal:
        runs.append(DiffRun("equal", tuple(equal)))
    return runs


def flatten_runs(runs: Iterable[DiffRun]) -> list[DiffLine]:
    lines: list[DiffLine] = []
    index = 0
    for run in runs:
        for text in run.lines:
            if run.tag == "insert":
                lines.append(DiffLine(index, None, text, DiffLineType.ADDED))
            elif run.tag == "delete":
                lines.append(DiffLine(index, text, None, DiffLineType.DELETED))
            else:
                lines.append(DiffLine(index, text, text, DiffLineType.UNCHANGED))
            index += 1
    return lines


def compute_stats(lines: Sequence[DiffLine], total_a: int, total_b: int) -> ComparisonStats:
    added = sum(1 for line in lines if line.type is DiffLineType.ADDED)
    deleted = sum(1 for line in lines if line.type is DiffLineType.DELETED)
    unchanged = sum(1 for line in lines if line.type is DiffLineType.UNCHANGED)
    # Two empty inputs give 0 / 1, not "fully similar".
    denominator = max(1, total_a, total_b)
    similarity = max(0.0, min(1.0, unchanged / denominator))
    return ComparisonStats(
        added=added,
        deleted=deleted,
        unchanged=unchanged,
        total_a=total_a,
        total_b=total_b,
        similarity=similarity,
    )


def compute_diff_lines(text_a: str, text_b: str, config: ComparisonConfig) -> CompareOutcome:
    """Run filter, diff and statistics for one pair of canonical texts."""
    resolve_granularity(config.granularity)
    lines_a = split_lines(normalize_text(text_a, config))
    lines_b = split_lines(normalize_text(text_b, config))
    runs = diff_lines(lines_a, lines_b, ignore_whitespace=config.ignore_whitespace)
    lines = flatten_runs(runs)
    return CompareOutcome(lines=tuple(lines), stats=compute_stats(lines, len(lines_a), len(lines_b)))


def changed_line_indices(lines: Iterable[DiffLine]) -> list[int]:
    return [line.index for line in lines if line.type is not DiffLineType.UNCHANGED]


__all__ = [
    "DiffRun",
    "changed_line_indices",
    "compute_diff_lines",
    "compute_stats",
    "diff_lines",
    "flatten_runs",
    "whitespace_key",
]
