"""
GitHub Action 入口（单次运行）。

  python -m ai_pr_review.cli

流程：读配置 -> 读 `GITHUB_EVENT_PATH` 事件 -> run_review。
任何未捕获的异常都会记日志并以非 0 退出码结束；不支持的事件 / 没有 diff 正常退出。
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

import anyio
import httpx

from ai_pr_review.config import load_config_from_env
from ai_pr_review.github.events import load_actions_event
from ai_pr_review.main import build_clients
from ai_pr_review.review.orchestrator import build_review_orchestrator
from ai_pr_review.review.orchestrator import run_review

logger = logging.getLogger(__name__)


async def run_action(environ: Mapping[str, str]) -> None:
    config = load_config_from_env(environ)
    event = await load_actions_event(environ.get("GITHUB_EVENT_PATH", ""))

    async with httpx.AsyncClient(timeout=httpx.Timeout(30.0)) as http_client:
        llm_client, github_client = build_clients(config=config, http_client=http_client)
        orchestrator = build_review_orchestrator(llm_client=llm_client)
        await run_review(
            orchestrator=orchestrator,
            github_client=github_client,
            event=event,
            exclude_patterns=config.exclude_patterns,
        )


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        anyio.run(run_action, dict(os.environ))
    except Exception:
        logger.exception("AI review run failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
