"""
本地 Mock OpenAI-compatible LLM server。

用途：
- 在没有真实 LLM 的情况下，本地跑通闭环（prompt -> markdown 包裹的 JSON -> 行内评论）

启动：
  python -m ai_pr_review.dev.mock_openai_server
然后设置 OPENAI_BASE_URL=http://127.0.0.1:9001
"""

from __future__ import annotations

import json
from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel, Field

from ai_pr_review.llm.client import ChatMessage


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)


def _extract_first_annotated_line_number(prompt: str) -> str | None:
    """
    从 review prompt 的 diff 代码块里取第一行的行号。

    形如：
      ```diff
      @@ -1,3 +1,4 @@
      1  line1
      2 +line2
    """
    lines = prompt.splitlines()
    try:
        start = lines.index("```diff")
    except ValueError:
        return None
    # start + 1 是 hunk 头
    for line in lines[start + 2 :]:
        if line.startswith("```"):
            return None
        first = line.split(" ", 1)[0]
        if first.isdigit():
            return first
    return None


def _build_mock_review_reply(line_number: str) -> str:
    review = {
        "reviews": [
            {
                "lineNumber": line_number,
                "reviewComment": "[MOCK] Consider handling the error path here, e.g. `if value is None: raise ValueError(...)`.",
            }
        ]
    }
    return "```json\n" + json.dumps(review, ensure_ascii=False, indent=2) + "\n```"


def _decide_mock_response(messages: Sequence[ChatMessage]) -> str:
    user_texts = [m.content for m in messages if m.role == "user"]
    if not user_texts:
        raise ValueError("Mock server expects at least one user message")
    prompt = "\n".join(user_texts)

    line_number = _extract_first_annotated_line_number(prompt=prompt)
    if line_number is None:
        # 兜底：返回一个“空评论”的结构，避免流程卡死
        return '```json\n{"reviews": []}\n```'
    return _build_mock_review_reply(line_number=line_number)


app = FastAPI(title="Mock OpenAI-compatible LLM", version="0.1.0")


@app.post("/v1/chat/completions")
async def chat_completions(req: ChatCompletionRequest) -> dict[str, object]:
    content = _decide_mock_response(messages=req.messages)
    return {
        "id": "chatcmpl-mock",
        "object": "chat.completion",
        "created": 0,
        "model": req.model,
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9001)


if __name__ == "__main__":
    main()
