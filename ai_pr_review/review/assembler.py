from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ai_pr_review.review.models import LineNumber
from ai_pr_review.review.models import PositionIndex
from ai_pr_review.review.models import ReviewComment
from ai_pr_review.review.models import ReviewFinding

logger = logging.getLogger(__name__)

# 只接受 ASCII 十进制整数（int() 还会接受 "1_2" 和全角数字）
_LINE_NUMBER_RE = re.compile(r"[+-]?[0-9]+")


def assemble_review_comments(
    path: str,
    findings: Sequence[ReviewFinding],
    index: PositionIndex,
) -> list[ReviewComment]:
    """
    把模型建议按行号对齐到 chunk 的 position。

    - 行号不是整数 / 不在本 chunk 里：丢弃该条并记日志（不影响其它建议）
    - 输出顺序与输入 findings 一致
    """
    comments: list[ReviewComment] = []
    for finding in findings:
        text = finding.line_number.strip()
        if _LINE_NUMBER_RE.fullmatch(text) is None:
            logger.warning(f"Invalid line number {finding.line_number!r} from LLM for file {path}")
            continue
        line_number = LineNumber(int(text))

        position = index.get(line_number)
        if position is None:
            logger.warning(f"Line number {line_number} not found in diff for file {path}")
            continue

        comments.append(ReviewComment(path=path, position=position, body=finding.review_comment))
    return comments
