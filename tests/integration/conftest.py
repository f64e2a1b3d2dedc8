from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _no_env(monkeypatch):
    for name in ("SITEPROGRESS_CONFIG", "SITEPROGRESS_LOG_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
