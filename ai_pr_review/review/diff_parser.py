from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ai_pr_review.review.models import DEV_NULL
from ai_pr_review.review.models import AdditionChange
from ai_pr_review.review.models import ContextChange
from ai_pr_review.review.models import DeletionChange
from ai_pr_review.review.models import DiffChunk
from ai_pr_review.review.models import DiffFile
from ai_pr_review.review.models import LineChange
from ai_pr_review.review.models import LineNumber

logger = logging.getLogger(__name__)

_GIT_HEADER_RE = re.compile(r"^diff --git (?:\"?a/)?(.+?)\"? (?:\"?b/)?(.+?)\"?$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass
class _PendingChunk:
    header: str
    old_start: int = 0
    old_lines: int = 0
    new_start: int = 0
    new_lines: int = 0
    changes: list[LineChange] = field(default_factory=list)


@dataclass
class _PendingFile:
    from_path: str = ""
    to_path: str = ""
    is_new: bool = False
    is_deleted: bool = False
    additions: int = 0
    deletions: int = 0
    chunks: list[_PendingChunk] = field(default_factory=list)
    saw_from_header: bool = False


def parse_diff(text: str) -> list[DiffFile]:
    """
    将 unified diff 文本解析为 `DiffFile` 列表（纯函数）。

    - 行号完全由 `@@ -a,b +c,d @@` 指令推进：新增行取新文件行号，删除行取旧文件行号，上下文行两者都带
    - hunk 头解析失败：保留一个空 chunk 并记日志，后续 hunk/文件照常解析
    """
    files: list[_PendingFile] = []
    current: _PendingFile | None = None
    chunk: _PendingChunk | None = None
    old_line = 0
    new_line = 0
    remaining_old = 0
    remaining_new = 0
    # 头坏掉的 hunk 无法知道行数，其正文一直跳到下一个 hunk 头或文件头
    skipping_broken_hunk = False

    for line in text.splitlines():
        if skipping_broken_hunk:
            if not (line.startswith("@@") or line.startswith("diff --git ")):
                continue
            skipping_broken_hunk = False

        if line.startswith("\\") and chunk is not None and chunk.changes:
            # "\ No newline at end of file"：在 patch 里占一个 position，沿用上一行的类型与行号
            chunk.changes.append(_repeat_change(chunk.changes[-1], content=line))
            continue

        if current is not None and chunk is not None and (remaining_old > 0 or remaining_new > 0):
            if line.startswith("+"):
                chunk.changes.append(AdditionChange(line_number=LineNumber(new_line), content=line))
                current.additions += 1
                new_line += 1
                remaining_new -= 1
                continue
            if line.startswith("-"):
                chunk.changes.append(DeletionChange(line_number=LineNumber(old_line), content=line))
                current.deletions += 1
                old_line += 1
                remaining_old -= 1
                continue
            if line.startswith(" ") or line == "":
                chunk.changes.append(
                    ContextChange(
                        old_line_number=LineNumber(old_line),
                        new_line_number=LineNumber(new_line),
                        content=line,
                    )
                )
                old_line += 1
                new_line += 1
                remaining_old -= 1
                remaining_new -= 1
                continue
            logger.warning(f"Unexpected line inside hunk {chunk.header!r}: {line!r}")
            remaining_old = remaining_new = 0

        if line.startswith("diff --git "):
            current = _PendingFile()
            files.append(current)
            chunk = None
            match = _GIT_HEADER_RE.match(line)
            if match:
                current.from_path = match.group(1)
                current.to_path = match.group(2)
            continue

        if line.startswith("--- "):
            if current is None or current.chunks or current.saw_from_header:
                current = _PendingFile()
                files.append(current)
                chunk = None
            current.from_path = _normalize_path(line[4:])
            current.saw_from_header = True
            continue

        if line.startswith("+++ "):
            if current is None:
                current = _PendingFile()
                files.append(current)
            current.to_path = _normalize_path(line[4:])
            continue

        if current is None:
            continue

        if line.startswith("new file mode"):
            current.is_new = True
            current.from_path = DEV_NULL
            continue
        if line.startswith("deleted file mode"):
            current.is_deleted = True
            current.to_path = DEV_NULL
            continue
        if line.startswith("rename from "):
            current.from_path = line[len("rename from ") :]
            continue
        if line.startswith("rename to "):
            current.to_path = line[len("rename to ") :]
            continue

        if line.startswith("@@"):
            chunk = _PendingChunk(header=line)
            current.chunks.append(chunk)
            match = _HUNK_HEADER_RE.match(line)
            if match is None:
                logger.warning(f"Invalid diff hunk header in {current.to_path or current.from_path}: {line!r}")
                remaining_old = remaining_new = 0
                skipping_broken_hunk = True
                continue
            chunk.old_start = int(match.group(1))
            chunk.old_lines = int(match.group(2)) if match.group(2) is not None else 1
            chunk.new_start = int(match.group(3))
            chunk.new_lines = int(match.group(4)) if match.group(4) is not None else 1
            old_line, new_line = chunk.old_start, chunk.new_start
            remaining_old, remaining_new = chunk.old_lines, chunk.new_lines
            continue

    return [_freeze_file(f) for f in files]


def _repeat_change(previous: LineChange, content: str) -> LineChange:
    return previous.model_copy(update={"content": content})


def _normalize_path(raw: str) -> str:
    # "--- a/foo.py\t2024-01-01 00:00:00" -> "foo.py"
    path = raw.split("\t", 1)[0].strip().strip('"')
    if path == DEV_NULL:
        return path
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _freeze_file(pending: _PendingFile) -> DiffFile:
    chunks = [
        DiffChunk(
            header=c.header,
            old_start=c.old_start,
            old_lines=c.old_lines,
            new_start=c.new_start,
            new_lines=c.new_lines,
            changes=c.changes,
        )
        for c in pending.chunks
    ]
    return DiffFile(
        from_path=pending.from_path,
        to_path=pending.to_path,
        chunks=chunks,
        is_new=pending.is_new or pending.from_path == DEV_NULL,
        is_deleted=pending.is_deleted or pending.to_path == DEV_NULL,
        additions=pending.additions,
        deletions=pending.deletions,
    )
