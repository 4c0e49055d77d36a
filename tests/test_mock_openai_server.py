from __future__ import annotations

from fastapi.testclient import TestClient

from ai_pr_review.dev.mock_openai_server import _decide_mock_response
from ai_pr_review.dev.mock_openai_server import app
from ai_pr_review.llm.client import ChatMessage
from ai_pr_review.review.diff_parser import parse_diff
from ai_pr_review.review.extractor import extract_review_findings
from ai_pr_review.review.models import PRContext
from ai_pr_review.review.prompt import build_review_prompt


def _prompt() -> str:
    diff = "\n".join(["--- a/a.py", "+++ b/a.py", "@@ -4,2 +4,2 @@", " keep", "-x = 1", "+x = 2"])
    f = parse_diff(diff)[0]
    pr = PRContext(owner="o", repo="r", pull_number=1, title="t", description="d", commit_id="c")
    return build_review_prompt(file=f, chunk=f.chunks[0], pr=pr)


def test_mock_reply_targets_first_annotated_line() -> None:
    reply = _decide_mock_response([ChatMessage(role="user", content=_prompt())])
    findings = extract_review_findings(reply)
    assert findings is not None
    assert [f.line_number for f in findings] == ["4"]


def test_mock_reply_without_diff_is_empty_review() -> None:
    reply = _decide_mock_response([ChatMessage(role="user", content="hello")])
    assert extract_review_findings(reply) == []


def test_mock_chat_completions_endpoint() -> None:
    client = TestClient(app)
    response = client.post(
        "/v1/chat/completions",
        json={"model": "mock", "messages": [{"role": "user", "content": _prompt()}]},
    )
    assert response.status_code == 200
    content = response.json()["choices"][0]["message"]["content"]
    assert content.startswith("```json")
