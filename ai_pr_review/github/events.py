"""
GitHub Actions 事件来源。

Actions runner 会把触发事件的 payload 写到 `GITHUB_EVENT_PATH` 指向的 JSON 文件里。
"""

from __future__ import annotations

import json

import anyio

from ai_pr_review.github.schemas import GitHubPullRequestEvent

SUPPORTED_ACTIONS: tuple[str, ...] = ("opened", "synchronize")


def is_supported_action(action: str) -> bool:
    return action in SUPPORTED_ACTIONS


async def load_actions_event(event_path: str) -> GitHubPullRequestEvent:
    """
    读取并校验 Actions event 文件。

    - 失败：路径为空 / 文件不存在 / 不是合法 JSON / 结构不符，直接抛错（致命错误）
    """
    if not event_path:
        raise ValueError("GITHUB_EVENT_PATH is not set")
    raw = await anyio.Path(event_path).read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Event payload is not valid JSON: {event_path}") from exc
    return GitHubPullRequestEvent.model_validate(payload)
