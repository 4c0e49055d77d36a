from __future__ import annotations

import logging

import pytest

from ai_pr_review.review.assembler import assemble_review_comments
from ai_pr_review.review.diff_parser import parse_diff
from ai_pr_review.review.extractor import extract_review_findings
from ai_pr_review.review.models import ReviewFinding
from ai_pr_review.review.positions import build_position_index


def _finding(line_number: str, comment: str) -> ReviewFinding:
    return ReviewFinding(lineNumber=line_number, reviewComment=comment)


def test_model_line_number_maps_to_diff_position() -> None:
    diff = "\n".join(
        [
            "diff --git a/src/app.py b/src/app.py",
            "--- a/src/app.py",
            "+++ b/src/app.py",
            "@@ -8,2 +8,4 @@",
            " line8",
            " line9",
            "+line10",
            "+line11",
        ]
    )
    f = parse_diff(diff)[0]
    findings = extract_review_findings('```json\n{"reviews": [{"lineNumber": "11", "reviewComment": "Rename."}]}\n```')
    assert findings is not None

    comments = assemble_review_comments(path=f.to_path, findings=findings, index=build_position_index(f.chunks[0]))
    assert len(comments) == 1
    assert comments[0].path == "src/app.py"
    assert comments[0].position == 4
    assert comments[0].body == "Rename."


def test_every_indexed_line_round_trips() -> None:
    index = {10: 1, 11: 3, 12: 4}
    for line_number, position in index.items():
        comments = assemble_review_comments(
            path="a.py",
            findings=[_finding(str(line_number), "c")],
            index=index,
        )
        assert [c.position for c in comments] == [position]


def test_unknown_line_is_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        comments = assemble_review_comments(path="a.py", findings=[_finding("99", "c")], index={1: 1})
    assert comments == []
    assert "Line number 99 not found in diff for file a.py" in caplog.text


def test_non_numeric_line_is_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        comments = assemble_review_comments(
            path="a.py",
            findings=[_finding("line 3", "c"), _finding("", "d")],
            index={3: 1},
        )
    assert comments == []
    assert "Invalid line number 'line 3'" in caplog.text


def test_output_follows_finding_order_and_skips_misses() -> None:
    findings = [_finding("3", "third"), _finding("7", "missing"), _finding(" 1 ", "first")]
    comments = assemble_review_comments(path="a.py", findings=findings, index={1: 1, 3: 2})
    assert [(c.position, c.body) for c in comments] == [(2, "third"), (1, "first")]


def test_line_number_must_be_plain_ascii_integer(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        comments = assemble_review_comments(
            path="a.py",
            findings=[_finding("1_2", "underscore"), _finding("١٢", "arabic-indic"), _finding("+3", "signed")],
            index={3: 1, 12: 2},
        )
    assert [(c.position, c.body) for c in comments] == [(1, "signed")]
    assert "Invalid line number '1_2'" in caplog.text
    assert "Invalid line number '١٢'" in caplog.text
