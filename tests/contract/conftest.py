from __future__ import annotations

import json
from pathlib import Path

import pytest

SCHEMA_DIR = Path(__file__).parent / "schemas"


@pytest.fixture()
def load_schema():
    def _load(name: str) -> dict:
        return json.loads((SCHEMA_DIR / f"{name}.schema.json").read_text(encoding="utf-8"))

    return _load


@pytest.fixture(autouse=True)
def _no_env(monkeypatch):
    for name in ("SITEPROGRESS_CONFIG", "SITEPROGRESS_LOG_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
