"""
GitHub Webhook / Actions event / API response schemas（Pydantic）。

说明：
- 字段只覆盖当前流程需要的子集（PR 事件 + PR 详情 + commits 列表）。
- Actions 的 event 文件和 webhook payload 结构基本一致，action 不做 Literal 限制，
  不支持的 action 由 orchestrator 记日志后忽略。
"""

from __future__ import annotations

from pydantic import BaseModel


class GitHubOwner(BaseModel):
    login: str


class GitHubRepository(BaseModel):
    name: str
    owner: GitHubOwner


class GitHubPullRequestEvent(BaseModel):
    """
    `pull_request` 事件（最小结构）。

    action: opened/synchronize 会触发 review，其余忽略
    number: PR 编号（payload 顶层字段）
    """

    action: str
    number: int
    repository: GitHubRepository


class GitHubPullRequest(BaseModel):
    """GET /repos/{owner}/{repo}/pulls/{pull_number}（只取标题与描述）。"""

    number: int
    title: str | None = None
    body: str | None = None


class GitHubCommit(BaseModel):
    """GET /repos/{owner}/{repo}/pulls/{pull_number}/commits 的 item。"""

    sha: str


class GitHubReviewComment(BaseModel):
    """创建 review 时 `comments` 数组的 item（position 寻址）。"""

    path: str
    position: int
    body: str
