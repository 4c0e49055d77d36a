"""
GitHub -> Review domain adapter。

职责：
- 将 PR 事件 + GitHub API 返回拼成平台无关的 `PRContext`
- `ReviewComment` -> GitHub review comment payload
"""

from __future__ import annotations

from collections.abc import Sequence

from ai_pr_review.github.client import GitHubClient
from ai_pr_review.github.schemas import GitHubPullRequestEvent
from ai_pr_review.github.schemas import GitHubReviewComment
from ai_pr_review.review.models import PRContext
from ai_pr_review.review.models import ReviewComment


async def build_pr_context(github_client: GitHubClient, event: GitHubPullRequestEvent) -> PRContext:
    """
    拉取 PR 标题/描述，以及最新 commit 的 SHA（review 需要挂在具体 commit 上）。

    - 失败：API 出错直接抛（属于致命错误，整次运行终止）
    """
    owner = event.repository.owner.login
    repo = event.repository.name
    pull_number = event.number

    pull_request = await github_client.get_pull_request(owner=owner, repo=repo, pull_number=pull_number)
    commits = await github_client.list_pull_request_commits(owner=owner, repo=repo, pull_number=pull_number)
    if not commits:
        raise ValueError(f"Pull request {owner}/{repo}#{pull_number} has no commits")

    return PRContext(
        owner=owner,
        repo=repo,
        pull_number=pull_number,
        title=pull_request.title or "",
        description=pull_request.body or "",
        commit_id=commits[-1].sha,
    )


def to_github_review_comments(comments: Sequence[ReviewComment]) -> list[GitHubReviewComment]:
    return [GitHubReviewComment(path=c.path, position=c.position, body=c.body) for c in comments]
