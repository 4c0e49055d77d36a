"""
从模型的自由文本回复里恢复结构化 review 结果。

失败策略：
- 这里任何失败都返回 None（= 本 chunk 没有建议），绝不向外抛异常
- 一个 chunk 的坏输出不能中断整次 review
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from ai_pr_review.review.models import ReviewFinding
from ai_pr_review.review.models import ReviewResponse

logger = logging.getLogger(__name__)

# 先吃掉合法的 "\\"，剩下的反斜杠如果后面不是合法转义字符就翻倍
_INVALID_ESCAPE_RE = re.compile(r'\\\\|\\(?!["\\/bfnrtu])')


def iter_json_objects(text: str) -> Iterator[str]:
    """
    按顺序返回文本里每个最外层、括号配平的 `{...}` 片段。

    字符串里的花括号不计数；没有闭合的片段直接丢弃。兼容前后的说明文字和 ```json 代码块。
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and depth > 0:
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[start : i + 1]


def find_json_object(text: str) -> str | None:
    """优先取包含 "reviews" 的片段，否则取第一个片段。"""
    candidates = list(iter_json_objects(text))
    for candidate in candidates:
        if '"reviews"' in candidate:
            return candidate
    return candidates[0] if candidates else None


def repair_invalid_escapes(json_text: str) -> str:
    """例如模型写了 `"fix \\d"`（JSON 里的 `\\d` 非法），修成 `"fix \\\\d"`。"""
    return _INVALID_ESCAPE_RE.sub(lambda m: m.group(0) if m.group(0) == "\\\\" else "\\\\", json_text)


def _validate_findings(items: list[Any]) -> list[ReviewFinding]:
    # 单条不合法只丢这一条
    findings: list[ReviewFinding] = []
    for item in items:
        try:
            findings.append(ReviewFinding.model_validate(item))
        except ValidationError as exc:
            logger.warning(f"Skipping malformed review finding {item!r}: {exc}")
    return findings


def extract_review_findings(raw: str) -> list[ReviewFinding] | None:
    """
    - 输入：模型原始回复文本
    - 输出：`ReviewFinding` 列表；找不到 JSON / 解析失败 / 缺少 reviews 数组 都返回 None
    """
    json_text = find_json_object(raw)
    if json_text is None:
        logger.error("No JSON found in LLM response")
        return None

    logger.info(f"Extracted JSON: {json_text}")
    json_text = repair_invalid_escapes(json_text)

    try:
        parsed = json.loads(json_text)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError 是 ValueError 的子类；超长整数 / 超深嵌套也在这里兜住
        logger.error(f"Invalid JSON from LLM: {exc}")
        return None

    try:
        result = ReviewResponse.model_validate(parsed)
    except ValidationError as exc:
        logger.error(f"LLM JSON does not match ReviewResponse: {exc}")
        return None

    return _validate_findings(result.reviews)
