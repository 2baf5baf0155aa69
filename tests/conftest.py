from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for key in list(os.environ):
        if key.startswith("POSDESK_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
