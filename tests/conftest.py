from __future__ import annotations

import pytest

from amlich.core.config import AMLICH_PROVIDER_ENV


@pytest.fixture(autouse=True)
def _default_provider(monkeypatch):
    # tests run against the closed-form provider unless they build their own calendar
    monkeypatch.delenv(AMLICH_PROVIDER_ENV, raising=False)
