"""
FastAPI 服务入口（webhook 模式）。

这里做三件事：
- 加载配置（严格校验环境变量）
- 组装外部依赖（HTTP Client / LLM Client / GitHub Client）
- 装配路由（health + github webhook）

启动：
  uvicorn --factory ai_pr_review.main:build_app

注意：
- 业务流程不写在这里（由 `review/orchestrator.py` 负责）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）
- GitHub Action 模式见 `cli.py`
"""

from __future__ import annotations

import os
from collections.abc import Mapping

import httpx
from fastapi import FastAPI

from ai_pr_review.config import AppConfig
from ai_pr_review.config import load_config_from_env
from ai_pr_review.github.client import GitHubClient
from ai_pr_review.github.schemas import GitHubPullRequestEvent
from ai_pr_review.github.webhook import build_github_webhook_router
from ai_pr_review.llm.client import OpenAICompatLLMClient
from ai_pr_review.review.orchestrator import build_review_orchestrator
from ai_pr_review.review.orchestrator import run_review


def build_clients(config: AppConfig, http_client: httpx.AsyncClient) -> tuple[OpenAICompatLLMClient, GitHubClient]:
    """LLM / GitHub client 只在进程启动时创建一次，之后显式传入 orchestrator。"""
    llm_client = OpenAICompatLLMClient(
        api_key=config.llm.api_key,
        base_url=str(config.llm.base_url).rstrip("/"),
        http_client=http_client,
        model=config.llm.model,
    )
    github_client = GitHubClient(
        api_base_url=str(config.github.api_base_url).rstrip("/"),
        token=config.github.token,
        http_client=http_client,
    )
    return llm_client, github_client


def build_app(environ: Mapping[str, str] | None = None) -> FastAPI:
    """创建并返回 FastAPI app（便于测试/复用）。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    config = load_config_from_env(os.environ if environ is None else environ)
    if config.github.webhook_secret is None:
        raise ValueError("Missing required env vars: GITHUB_WEBHOOK_SECRET")

    # 2) 可复用的 HTTP client：供 GitHub API 与 LLM 调用使用
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
    llm_client, github_client = build_clients(config=config, http_client=http_client)
    orchestrator = build_review_orchestrator(llm_client=llm_client)

    app = FastAPI(title="AI PR Review", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"status": "ok"}

    async def handle(event: GitHubPullRequestEvent) -> None:
        await run_review(
            orchestrator=orchestrator,
            github_client=github_client,
            event=event,
            exclude_patterns=config.exclude_patterns,
        )

    app.include_router(build_github_webhook_router(webhook_secret=config.github.webhook_secret, handler=handle))
    return app
