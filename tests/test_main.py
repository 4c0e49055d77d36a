from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ai_pr_review.main import build_app

BASE_ENV = {"GITHUB_TOKEN": "t", "OPENAI_API_KEY": "k", "OPENAI_API_MODEL": "m"}


def test_build_app_requires_webhook_secret() -> None:
    with pytest.raises(ValueError):
        build_app(environ=BASE_ENV)


def test_build_app_health_and_routes() -> None:
    app = build_app(environ={**BASE_ENV, "GITHUB_WEBHOOK_SECRET": "s"})
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "ok"}
    assert "/github/webhook" in {route.path for route in app.routes}
