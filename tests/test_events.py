from __future__ import annotations

import json
from pathlib import Path

import anyio
import pytest

from ai_pr_review.github.events import is_supported_action
from ai_pr_review.github.events import load_actions_event


def test_load_actions_event(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    payload = {
        "action": "synchronize",
        "number": 42,
        "repository": {"name": "demo", "owner": {"login": "octo"}, "full_name": "octo/demo"},
        "pull_request": {"number": 42},
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    event = anyio.run(load_actions_event, str(path))

    assert event.action == "synchronize"
    assert event.number == 42
    assert event.repository.owner.login == "octo"


def test_load_actions_event_requires_path() -> None:
    with pytest.raises(ValueError):
        anyio.run(load_actions_event, "")


def test_load_actions_event_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "event.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        anyio.run(load_actions_event, str(path))


def test_supported_actions() -> None:
    assert is_supported_action("opened")
    assert is_supported_action("synchronize")
    assert not is_supported_action("closed")
    assert not is_supported_action("reopened")
