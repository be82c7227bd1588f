"""
Shared test fixtures.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from publish.config import AppConfig, StorageConfig
from publish.core.context import UploadContext
from publish.main import create_app


class FailingSinkFactory:
    """Sink factory whose first ``failures`` opens raise ``OSError``."""

    def __init__(self, inner, failures: int = 1, message: str = "No space left on device"):
        self.inner = inner
        self.failures = failures
        self.message = message
        self.opened: list[int] = []

    async def open(self, upload_id: int):
        self.opened.append(upload_id)
        if self.failures > 0:
            self.failures -= 1
            raise OSError(28, self.message)
        return await self.inner.open(upload_id)


@pytest.fixture
def data_dir(tmp_path) -> Path:
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def app_config(data_dir) -> AppConfig:
    return AppConfig(storage=StorageConfig(data_dir=data_dir))


@pytest.fixture
def context() -> UploadContext:
    return UploadContext()


@pytest.fixture
def app(app_config, context):
    return create_app(app_config, context=context)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
