"""
Review Orchestrator（核心流程编排）。

关键思想：
- **流程由工程代码控制**：files -> chunks -> prompt -> LLM -> extract -> assemble -> 汇总
- **LLM 只负责生成建议**：行号校验、position 映射、写回 GitHub 都是确定性代码

失败策略：
- 单个 chunk 的 LLM 调用 / 解析失败：记日志，该 chunk 不出评论，继续下一个
- 拉 diff 失败：整次运行失败（抛出去）
- 提交 review 失败：记日志（422 单独说明），不重试、不部分重提
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx
from openai import OpenAIError

from ai_pr_review.github.adapter import build_pr_context
from ai_pr_review.github.adapter import to_github_review_comments
from ai_pr_review.github.client import GitHubAPIError
from ai_pr_review.github.client import GitHubClient
from ai_pr_review.github.events import is_supported_action
from ai_pr_review.github.schemas import GitHubPullRequestEvent
from ai_pr_review.llm.client import ChatMessage
from ai_pr_review.llm.client import OpenAICompatLLMClient
from ai_pr_review.review.assembler import assemble_review_comments
from ai_pr_review.review.diff_parser import parse_diff
from ai_pr_review.review.extractor import extract_review_findings
from ai_pr_review.review.filters import filter_excluded_files
from ai_pr_review.review.models import DEV_NULL
from ai_pr_review.review.models import DiffChunk
from ai_pr_review.review.models import DiffFile
from ai_pr_review.review.models import PRContext
from ai_pr_review.review.models import ReviewComment
from ai_pr_review.review.positions import build_position_index
from ai_pr_review.review.prompt import build_review_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOrchestrator:
    """Orchestrator 运行时依赖集合（目前只需要 LLM client）。"""

    llm_client: OpenAICompatLLMClient


def build_review_orchestrator(llm_client: OpenAICompatLLMClient) -> ReviewOrchestrator:
    return ReviewOrchestrator(llm_client=llm_client)


async def review_chunk(
    orchestrator: ReviewOrchestrator,
    file: DiffFile,
    chunk: DiffChunk,
    pr: PRContext,
) -> list[ReviewComment]:
    """单个 chunk：prompt -> LLM -> 提取 JSON -> 对齐 position。任何失败都返回空列表。"""
    prompt = build_review_prompt(file=file, chunk=chunk, pr=pr)
    logger.info(f"Prompt: {prompt}")

    try:
        raw = await orchestrator.llm_client.complete_text(messages=[ChatMessage(role="user", content=prompt)])
    except (OpenAIError, httpx.HTTPError, RuntimeError) as exc:
        logger.error(f"LLM call failed for {file.to_path} {chunk.header}: {exc}")
        return []

    logger.info(f"Raw LLM response: {raw}")
    findings = extract_review_findings(raw)
    if findings is None:
        logger.warning(f"No usable review findings for {file.to_path} {chunk.header}")
        return []

    index = build_position_index(chunk)
    return assemble_review_comments(path=file.to_path, findings=findings, index=index)


async def analyze_diff(
    orchestrator: ReviewOrchestrator,
    files: Sequence[DiffFile],
    pr: PRContext,
) -> list[ReviewComment]:
    """
    逐文件、逐 chunk 顺序 review（同一时间只有一个 LLM 请求在飞）。

    输出顺序：文件顺序 -> chunk 顺序 -> 模型建议顺序。删除的文件（目标为 /dev/null）直接跳过。
    """
    comments: list[ReviewComment] = []
    for file in files:
        if file.to_path == DEV_NULL:
            continue
        for chunk in file.chunks:
            comments.extend(await review_chunk(orchestrator=orchestrator, file=file, chunk=chunk, pr=pr))
    return comments


async def submit_review(
    github_client: GitHubClient,
    pr: PRContext,
    comments: Sequence[ReviewComment],
) -> bool:
    """提交一次 review；没有评论就不提交。返回是否提交成功。"""
    if not comments:
        logger.info("No comments to post.")
        return False

    logger.info(f"Creating review with {len(comments)} comment(s) on commit {pr.commit_id}")
    try:
        await github_client.create_pull_request_review(
            owner=pr.owner,
            repo=pr.repo,
            pull_number=pr.pull_number,
            commit_id=pr.commit_id,
            comments=to_github_review_comments(comments),
        )
    except GitHubAPIError as exc:
        logger.error(f"Error creating review comment: {exc}")
        if exc.status_code == 422:
            logger.error("One or more comments have invalid positions or lines.")
        return False
    except httpx.HTTPError as exc:
        logger.error(f"Error creating review comment: {exc}")
        return False
    return True


async def run_review(
    orchestrator: ReviewOrchestrator,
    github_client: GitHubClient,
    event: GitHubPullRequestEvent,
    exclude_patterns: Sequence[str],
) -> list[ReviewComment]:
    """
    跑一次完整 review，返回本次生成的评论（无论是否提交成功）。

    - Step 1: 校验事件类型（只处理 opened / synchronize）
    - Step 2: PR 上下文 + diff（非 AI）
    - Step 3: 解析 diff、按 exclude 过滤
    - Step 4: 逐 chunk review，汇总后一次性提交
    """
    if not is_supported_action(event.action):
        logger.info(f"Unsupported event action: {event.action}")
        return []

    pr = await build_pr_context(github_client=github_client, event=event)
    diff = await github_client.get_pull_request_diff(owner=pr.owner, repo=pr.repo, pull_number=pr.pull_number)
    if not diff:
        logger.info("No diff found")
        return []

    files = filter_excluded_files(parse_diff(diff), exclude_patterns)
    comments = await analyze_diff(orchestrator=orchestrator, files=files, pr=pr)
    await submit_review(github_client=github_client, pr=pr, comments=comments)
    return comments
