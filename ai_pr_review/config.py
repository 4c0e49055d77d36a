"""
应用配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/字符串等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试

GitHub Action 的 `with:` 输入会以 `INPUT_<NAME>` 形式出现在环境变量里，
所以每个配置项先读 `INPUT_<NAME>`，再读 `<NAME>`。
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field, HttpUrl

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"


class GitHubConfig(BaseModel):
    api_base_url: HttpUrl
    token: str
    webhook_secret: str | None = None


class LLMConfig(BaseModel):
    base_url: HttpUrl
    api_key: str
    model: str


class AppConfig(BaseModel):
    """一次运行所需的配置集合。"""

    github: GitHubConfig
    llm: LLMConfig
    exclude_patterns: list[str] = Field(default_factory=list)


def _get_input(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(f"INPUT_{name}") or environ.get(name) or ""
    return value.strip()


def parse_exclude_patterns(raw: str) -> list[str]:
    """`"*.md, dist/**"` -> `["*.md", "dist/**"]`（去空白、丢空项）。"""
    return [p.strip() for p in raw.split(",") if p.strip()]


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：缺失/为空则抛 `ValueError`
    """
    required_keys: tuple[str, ...] = (
        "GITHUB_TOKEN",
        "OPENAI_API_KEY",
        "OPENAI_API_MODEL",
    )

    missing: list[str] = [key for key in required_keys if not _get_input(environ, key)]
    if missing:
        raise ValueError(f"Missing required env vars: {', '.join(missing)}")

    # 交给 Pydantic 做类型校验（例如 URL 合法性）
    return AppConfig(
        github=GitHubConfig(
            api_base_url=_get_input(environ, "GITHUB_API_BASE_URL") or DEFAULT_GITHUB_API_BASE_URL,
            token=_get_input(environ, "GITHUB_TOKEN"),
            webhook_secret=_get_input(environ, "GITHUB_WEBHOOK_SECRET") or None,
        ),
        llm=LLMConfig(
            base_url=_get_input(environ, "OPENAI_BASE_URL") or DEFAULT_LLM_BASE_URL,
            api_key=_get_input(environ, "OPENAI_API_KEY"),
            model=_get_input(environ, "OPENAI_API_MODEL"),
        ),
        exclude_patterns=parse_exclude_patterns(_get_input(environ, "EXCLUDE")),
    )
