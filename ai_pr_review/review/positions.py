"""
行号 -> diff position 映射。

GitHub review comment 的 `position` 是“该行在 hunk patch 文本里的序号”（从 1 开始，
新增/删除/上下文行都算），而不是文件里的绝对行号。模型看到的是行号，回写时要换成 position。
"""

from __future__ import annotations

from ai_pr_review.review.models import DiffChunk
from ai_pr_review.review.models import DiffPosition
from ai_pr_review.review.models import LineChange
from ai_pr_review.review.models import LineNumber
from ai_pr_review.review.models import PositionIndex


def relevant_line_number(change: LineChange) -> LineNumber:
    """新增/删除行取自身行号；上下文行取旧文件行号（prompt 标注也用这个）。"""
    if change.kind == "normal":
        return change.old_line_number
    return change.line_number


def build_position_index(chunk: DiffChunk) -> PositionIndex:
    """
    单次顺序遍历 chunk，构建 行号 -> position。

    同一行号重复出现时后者覆盖前者（例如 "\\ No newline at end of file" 沿用上一行行号）。
    """
    index: PositionIndex = {}
    for position, change in enumerate(chunk.changes, start=1):
        index[relevant_line_number(change)] = DiffPosition(position)
    return index
