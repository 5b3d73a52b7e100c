from __future__ import annotations

import pytest

from cwpipe.core.group import Group
from cwpipe.core.settings import BootstrapSettings, ReaderSettings, Settings, WriterSettings
from cwpipe.testing import FakeLogsClient

GROUP = "test-group"


@pytest.fixture
def client() -> FakeLogsClient:
    return FakeLogsClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        writer=WriterSettings(flush_interval_seconds=0.01),
        reader=ReaderSettings(poll_interval_seconds=0.01),
        bootstrap=BootstrapSettings(backoff_seconds=0.0),
    )


@pytest.fixture
def group(client: FakeLogsClient, settings: Settings) -> Group:
    return Group(client, GROUP, settings=settings)
