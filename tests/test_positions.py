from __future__ import annotations

from ai_pr_review.review.diff_parser import parse_diff
from ai_pr_review.review.models import DiffChunk
from ai_pr_review.review.positions import build_position_index


def _single_chunk(lines: list[str]) -> DiffChunk:
    diff = "\n".join(["--- a/src/app.py", "+++ b/src/app.py", *lines])
    return parse_diff(diff)[0].chunks[0]


def test_position_counts_every_line_type() -> None:
    chunk = _single_chunk(
        [
            "@@ -8,2 +8,4 @@ def main():",
            " line8",
            " line9",
            "+line10",
            "+line11",
        ]
    )
    assert build_position_index(chunk) == {8: 1, 9: 2, 10: 3, 11: 4}


def test_position_values_are_contiguous_from_one() -> None:
    chunk = _single_chunk(
        [
            "@@ -10,3 +10,3 @@",
            " a",
            "-b",
            "+b2",
            " c",
        ]
    )
    index = build_position_index(chunk)
    # 删除行（旧 11）和新增行（新 11）行号相同：后写覆盖
    assert index == {10: 1, 11: 3, 12: 4}
    assert max(index.values()) == len(chunk.changes)


def test_context_lines_use_old_file_line_number() -> None:
    chunk = _single_chunk(
        [
            "@@ -5,2 +7,3 @@",
            " keep",
            "+added",
            " tail",
        ]
    )
    assert build_position_index(chunk) == {5: 1, 8: 2, 6: 3}


def test_no_newline_marker_takes_later_position() -> None:
    chunk = _single_chunk(
        [
            "@@ -1 +1 @@",
            "-old",
            "+new",
            "\\ No newline at end of file",
        ]
    )
    assert build_position_index(chunk) == {1: 3}


def test_empty_chunk_gives_empty_index() -> None:
    chunk = DiffChunk(header="@@ -1,0 +1,0 @@", old_start=1, old_lines=0, new_start=1, new_lines=0)
    assert build_position_index(chunk) == {}
