from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _clean_udev_env(monkeypatch):
    for name in ("UDEV_MODE", "UDEV_GROUP", "UDEV_RULES_OUT", "UDEV_SORT_VENDORS", "UDEV_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
