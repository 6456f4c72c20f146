"""
Shared fixtures for tidy-url tests. No test touches the network.
"""

import pytest

from tidy_url.config import settings
from tidy_url.models import CleaningOptions


class FakeProbe:
    """HTTPS probe stand-in that records the URLs it was asked about."""

    def __init__(self, available: bool = True):
        self.available = available
        self.calls: list[str] = []

    async def __call__(self, url: str) -> bool:
        self.calls.append(url)
        return self.available


@pytest.fixture
def probe_ok() -> FakeProbe:
    return FakeProbe(available=True)


@pytest.fixture
def probe_down() -> FakeProbe:
    return FakeProbe(available=False)


@pytest.fixture
def all_options() -> CleaningOptions:
    """Every rule enabled, including the HTTPS upgrade."""
    return CleaningOptions(try_https=True)


@pytest.fixture
def offline_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the CLI off the network and away from the working directory's config."""
    monkeypatch.setattr(settings, "clean_try_https", False)
    monkeypatch.setattr(settings, "tracking_rules_path", str(tmp_path / "missing.yaml"))
