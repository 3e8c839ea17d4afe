from __future__ import annotations

import random
import time
import tracemalloc

import pytest

from filecompare.diffing import (
    DiffRun,
    changed_line_indices,
    compute_diff_lines,
    compute_stats,
    diff_lines,
    whitespace_key,
)
from filecompare.models import ComparisonConfig, DiffLine, DiffLineType

ADDED = DiffLineType.ADDED
DELETED = DiffLineType.DELETED
UNCHANGED = DiffLineType.UNCHANGED

SAMPLES = [
    ("", ""),
    ("a\n", ""),
    ("", "x\ny\n"),
    ("a\nb\nc\n", "a\nx\nc\n"),
    ("one\ntwo\nthree\nfour\nfive\n", "two\nthree\nsix\nfour\nfive\nseven\n"),
    ("x\nx\ny\nx\n", "y\nx\nx\nx\ny\n"),
    ("  indented\nplain\n", "indented\n\nplain\n"),
]


def test_single_line_change_scenario() -> None:
    outcome = compute_diff_lines("a\nb\nc\n", "a\nx\nc\n", ComparisonConfig())
    assert list(outcome.lines) == [
        DiffLine(0, "a", "a", UNCHANGED),
        DiffLine(1, "b", None, DELETED),
        DiffLine(2, None, "x", ADDED),
        DiffLine(3, "c", "c", UNCHANGED),
    ]
    stats = outcome.stats
    assert (stats.added, stats.deleted, stats.unchanged) == (1, 1, 2)
    assert (stats.total_a, stats.total_b) == (3, 3)
    assert stats.similarity == pytest.approx(2 / 3)


def test_two_empty_texts() -> None:
    outcome = compute_diff_lines("", "", ComparisonConfig())
    assert outcome.lines == ()
    stats = outcome.stats
    assert (stats.added, stats.deleted, stats.unchanged, stats.total_a, stats.total_b) == (0, 0, 0, 0, 0)
    assert stats.similarity == 0


def test_fully_added_document() -> None:
    outcome = compute_diff_lines("", "x\ny", ComparisonConfig())
    assert [(line.index, line.type) for line in outcome.lines] == [(0, ADDED), (1, ADDED)]
    assert outcome.stats.similarity == 0
    assert outcome.stats.total_b == 2


def test_deletions_precede_insertions_within_a_block() -> None:
    outcome = compute_diff_lines("a\nb\nc\nd\n", "a\nx\ny\nd\n", ComparisonConfig())
    assert [line.type for line in outcome.lines] == [UNCHANGED, DELETED, DELETED, ADDED, ADDED, UNCHANGED]
    assert [line.index for line in outcome.lines] == list(range(6))


@pytest.mark.parametrize(("text_a", "text_b"), SAMPLES)
def test_totals_are_consistent(text_a: str, text_b: str) -> None:
    for config in (ComparisonConfig(), ComparisonConfig(ignore_whitespace=False, ignore_empty_lines=True)):
        stats = compute_diff_lines(text_a, text_b, config).stats
        assert stats.unchanged + stats.deleted == stats.total_a
        assert stats.unchanged + stats.added == stats.total_b
        assert 0.0 <= stats.similarity <= 1.0


@pytest.mark.parametrize(("text_a", "text_b"), SAMPLES)
def test_comparison_is_symmetric(text_a: str, text_b: str) -> None:
    forward = compute_diff_lines(text_a, text_b, ComparisonConfig()).stats
    backward = compute_diff_lines(text_b, text_a, ComparisonConfig()).stats
    assert forward.added == backward.deleted
    assert forward.deleted == backward.added
    assert forward.similarity == backward.similarity


@pytest.mark.parametrize("text", ["a\n", "a\nb\n\nc", "x\nx\nx\n"])
def test_comparing_with_itself(text: str) -> None:
    stats = compute_diff_lines(text, text, ComparisonConfig()).stats
    assert stats.added == 0
    assert stats.deleted == 0
    assert stats.unchanged == stats.total_a == stats.total_b
    assert stats.similarity == 1


@pytest.mark.parametrize(("text_a", "text_b"), SAMPLES)
def test_ignore_empty_lines_never_increases_totals(text_a: str, text_b: str) -> None:
    kept = compute_diff_lines(text_a, text_b, ComparisonConfig(ignore_empty_lines=False)).stats
    dropped = compute_diff_lines(text_a, text_b, ComparisonConfig(ignore_empty_lines=True)).stats
    assert dropped.total_a <= kept.total_a
    assert dropped.total_b <= kept.total_b


def test_diff_is_minimal() -> None:
    runs = diff_lines(["a", "b", "c", "a", "b", "b", "a"], ["c", "b", "a", "b", "a", "c"])
    deleted = sum(len(run.lines) for run in runs if run.tag == "delete")
    inserted = sum(len(run.lines) for run in runs if run.tag == "insert")
    assert deleted + inserted == 5


def lcs_length(a: list[str], b: list[str]) -> int:
    row = [0] * (len(b) + 1)
    for item in a:
        previous = 0
        for j, other in enumerate(b, start=1):
            current = row[j]
            row[j] = previous + 1 if item == other else max(row[j], row[j - 1])
            previous = current
    return row[-1]


def test_unchanged_count_is_a_longest_common_subsequence() -> None:
    rng = random.Random(7)
    for _ in range(300):
        a = [rng.choice("abcd") for _ in range(rng.randint(0, 14))]
        b = [rng.choice("abcde") for _ in range(rng.randint(0, 14))]
        runs = diff_lines(a, b)
        kept = [line for run in runs if run.tag == "equal" for line in run.lines]
        assert len(kept) == lcs_length(a, b), (a, b)
        rebuilt_a = [line for run in runs if run.tag != "insert" for line in run.lines]
        rebuilt_b = [line for run in runs if run.tag != "delete" for line in run.lines]
        assert rebuilt_a == a
        assert rebuilt_b == b


def test_rotated_document_keeps_the_larger_half() -> None:
    lines_a = [f"line {i}" for i in range(1000)]
    lines_b = lines_a[500:] + lines_a[:500]
    runs = diff_lines(lines_a, lines_b)
    assert sum(len(run.lines) for run in runs if run.tag == "equal") == 500
    assert sum(len(run.lines) for run in runs if run.tag == "delete") == 500


def test_disjoint_large_inputs_stay_small_and_fast() -> None:
    text_a = "\n".join(f"left {i}" for i in range(5000))
    text_b = "\n".join(f"right {i}" for i in range(5000))
    tracemalloc.start()
    started = time.perf_counter()
    try:
        outcome = compute_diff_lines(text_a, text_b, ComparisonConfig())
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    elapsed = time.perf_counter() - started
    assert (outcome.stats.deleted, outcome.stats.added, outcome.stats.unchanged) == (5000, 5000, 0)
    assert elapsed < 5
    assert peak < 50 * 1024 * 1024


def test_sparse_edits_in_a_long_document() -> None:
    lines_a = [f"row {i}" for i in range(20000)]
    lines_b = list(lines_a)
    for position in range(0, 20000, 1000):
        lines_b[position] = f"edited {position}"
    lines_b.insert(10500, "inserted")
    tracemalloc.start()
    try:
        runs = diff_lines(lines_a, lines_b)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    assert sum(len(run.lines) for run in runs if run.tag == "equal") == 19980
    assert sum(len(run.lines) for run in runs if run.tag == "insert") == 21
    assert peak < 50 * 1024 * 1024


def test_runs_merge_consecutive_lines() -> None:
    assert diff_lines(["a", "b"], ["a", "b", "c", "d"]) == [
        DiffRun("equal", ("a", "b")),
        DiffRun("insert", ("c", "d")),
    ]


def test_ignore_whitespace_matches_but_keeps_text() -> None:
    text_a = "def  f():\n    return 1 \n"
    text_b = "def f():\n  return    1\n"
    loose = compute_diff_lines(text_a, text_b, ComparisonConfig(ignore_whitespace=True))
    assert [line.type for line in loose.lines] == [UNCHANGED, UNCHANGED]
    assert [line.right for line in loose.lines] == ["def f():", "  return    1"]
    strict = compute_diff_lines(text_a, text_b, ComparisonConfig(ignore_whitespace=False))
    assert strict.stats.unchanged == 0


def test_whitespace_key_collapses_runs() -> None:
    assert whitespace_key("  a \t b  ") == "a b"


def test_case_insensitive_comparison() -> None:
    outcome = compute_diff_lines("Hello\nWorld\n", "hello\nWORLD\n", ComparisonConfig(case_sensitive=False))
    assert outcome.stats.unchanged == 2
    assert outcome.lines[0].left == "hello"


def test_unknown_granularity_is_rejected() -> None:
    config = ComparisonConfig(granularity="word")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="Unsupported granularity"):
        compute_diff_lines("a", "b", config)


def test_changed_line_indices() -> None:
    outcome = compute_diff_lines("a\nb\nc\n", "a\nx\nc\n", ComparisonConfig())
    assert changed_line_indices(outcome.lines) == [1, 2]


def test_compute_stats_clamps_similarity() -> None:
    lines = [DiffLine(0, "a", "a", UNCHANGED), DiffLine(1, None, "b", ADDED)]
    stats = compute_stats(lines, total_a=1, total_b=2)
    assert stats.similarity == 0.5
    assert compute_stats([], 0, 0).similarity == 0
