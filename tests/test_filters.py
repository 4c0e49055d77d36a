from __future__ import annotations

from ai_pr_review.review.filters import filter_excluded_files
from ai_pr_review.review.filters import is_excluded
from ai_pr_review.review.models import DiffFile


def _file(path: str) -> DiffFile:
    return DiffFile(from_path=path, to_path=path)


def test_filter_excluded_files_keeps_order() -> None:
    files = [_file("src/a.py"), _file("package-lock.json"), _file("docs/guide.md"), _file("src/b.py")]
    kept = filter_excluded_files(files, ["*.json", "docs/*"])
    assert [f.to_path for f in kept] == ["src/a.py", "src/b.py"]


def test_no_patterns_keeps_everything() -> None:
    files = [_file("a.py"), _file("b.py")]
    assert filter_excluded_files(files, []) == files


def test_is_excluded_matches_nested_paths() -> None:
    assert is_excluded("dist/js/app.min.js", ["dist/**"])
    assert not is_excluded("src/app.py", ["dist/**", "*.md"])


def test_is_excluded_globstar_matches_root_and_nested_files() -> None:
    assert is_excluded("README.md", ["**/*.md"])
    assert is_excluded("docs/a.md", ["**/*.md"])
    assert is_excluded("docs/deep/b.md", ["**/*.md"])
    assert not is_excluded("docs/a.py", ["**/*.md"])


def test_is_excluded_single_star_stays_in_one_segment() -> None:
    assert is_excluded("notes.md", ["*.md"])
    assert not is_excluded("docs/notes.md", ["*.md"])
