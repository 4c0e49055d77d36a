"""
LLM Client（基于 OpenAI SDK，OpenAI-compatible API）。

目标：
- **尽量薄**：只做协议适配与错误处理
- **不做 JSON 解析**：review 的回复是自由文本（JSON 包在 markdown 里），
  结构化恢复交给 `review/extractor.py`
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    """OpenAI chat message 的最小结构。"""

    role: str
    content: str


def _normalize_base_url(base_url: str) -> str:
    normalized = base_url.rstrip("/")
    if normalized.endswith("/v1"):
        return normalized
    return f"{normalized}/v1"


class OpenAICompatLLMClient:
    """OpenAI-compatible chat completion client。"""

    def __init__(self, api_key: str, base_url: str, http_client: httpx.AsyncClient, model: str) -> None:
        """
        - api_key: LLM API key
        - base_url: OpenAI-compatible base URL
        - http_client: 复用 httpx.AsyncClient 连接池
        - model: 模型名（例如 `gpt-4o`）
        """
        self._base_url = _normalize_base_url(base_url=base_url)
        self._model = model
        self._client = AsyncOpenAI(api_key=api_key, base_url=self._base_url, http_client=http_client)

    @property
    def model(self) -> str:
        return self._model

    async def complete_text(self, messages: Sequence[ChatMessage]) -> str:
        """
        调用 chat completion 并返回纯文本 content。

        注意：
        - 不做重试
        - 出错直接抛异常，由 orchestrator 决定“这个 chunk 不出建议”
        """
        try:
            logger.info(f"LLM request: model={self._model}, messages={len(messages)} msg(s)")
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.model_dump() for m in messages],
                top_p=1,
                frequency_penalty=0,
                presence_penalty=0,
            )
        except OpenAIError as exc:
            logger.error(f"LLM API error: {exc}")
            raise
        except httpx.HTTPError as exc:
            logger.error(f"LLM HTTP error: {exc}")
            raise

        if not response.choices:
            logger.error("LLM returned no choices")
            raise RuntimeError("LLM returned no choices")

        content = response.choices[0].message.content
        if content is None:
            logger.error("LLM returned None content")
            raise RuntimeError("LLM returned None content")

        logger.info(f"LLM response: {len(content)} chars")
        return str(content).strip()
