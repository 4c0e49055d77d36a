"""
GitHub API 客户端（外部系统连接器）。

约定：
- 这里只做 HTTP 调用 + 错误处理 + schema 校验
- 出错直接抛错（不要吞），便于定位与告警；是否降级由 orchestrator 决定
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from ai_pr_review.github.schemas import GitHubCommit
from ai_pr_review.github.schemas import GitHubPullRequest
from ai_pr_review.github.schemas import GitHubReviewComment


class GitHubAPIError(RuntimeError):
    """GitHub API 返回 >= 400。`status_code` 用于区分 422（position 非法）与其它错误。"""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"GitHub API error {status_code}: {message}")
        self.status_code = status_code


class GitHubClient:
    """最小 GitHub API client（PR 详情 / commits / diff / 创建 review）。"""

    def __init__(self, api_base_url: str, token: str, http_client: httpx.AsyncClient) -> None:
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._http_client = http_client

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _pull_url(self, owner: str, repo: str, pull_number: int) -> str:
        return f"{self._api_base_url}/repos/{owner}/{repo}/pulls/{pull_number}"

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise GitHubAPIError(status_code=response.status_code, message=response.text)

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> GitHubPullRequest:
        response = await self._http_client.get(self._pull_url(owner, repo, pull_number), headers=self._headers())
        self._raise_for_status(response)
        return GitHubPullRequest.model_validate(response.json())

    async def list_pull_request_commits(self, owner: str, repo: str, pull_number: int) -> list[GitHubCommit]:
        """
        拉取 PR 的 commits（按时间顺序，最后一个是最新 commit）。

        注意：GitHub API 有分页；这里会拉取全部 commits。
        """
        per_page = 100
        page = 1
        all_items: list[GitHubCommit] = []
        while True:
            url = f"{self._pull_url(owner, repo, pull_number)}/commits"
            response = await self._http_client.get(
                url,
                headers=self._headers(),
                params={"per_page": per_page, "page": page},
            )
            self._raise_for_status(response)
            data = response.json()
            if not isinstance(data, list):
                raise RuntimeError(f"Unexpected GitHub response shape for PR commits: {data}")
            items = [GitHubCommit.model_validate(x) for x in data]
            all_items.extend(items)
            if len(items) < per_page:
                break
            page += 1
        return all_items

    async def get_pull_request_diff(self, owner: str, repo: str, pull_number: int) -> str | None:
        """拉取整个 PR 的 unified diff 文本；空 diff 返回 None。"""
        response = await self._http_client.get(
            self._pull_url(owner, repo, pull_number),
            headers=self._headers(accept="application/vnd.github.v3.diff"),
        )
        self._raise_for_status(response)
        return response.text or None

    async def create_pull_request_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        commit_id: str,
        comments: Sequence[GitHubReviewComment],
    ) -> None:
        """
        创建一条带行内评论的 PR review。

        说明：event=COMMENT 表示“评论型 review”（不 approve / request changes）。
        position 与 commit_id 对不上时 GitHub 返回 422。
        """
        url = f"{self._pull_url(owner, repo, pull_number)}/reviews"
        payload = {
            "commit_id": commit_id,
            "event": "COMMENT",
            "comments": [c.model_dump() for c in comments],
        }
        response = await self._http_client.post(url, headers=self._headers(), json=payload)
        self._raise_for_status(response)
