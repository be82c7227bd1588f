"""
Tests for delayed upload expiry.
"""

import asyncio
import threading
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from publish.config import AppConfig, StorageConfig
from publish.main import create_app
from publish.storage.retention import RetentionScheduler


class TestRetentionScheduler:

    def test_expired_upload_is_deleted(self, data_dir):
        (data_dir / "0").write_bytes(b"x")

        async def run():
            retention = RetentionScheduler(data_dir, delay_s=0.01)
            retention.schedule(0)
            await asyncio.sleep(0.1)
            return retention.pending

        assert asyncio.run(run()) == 0
        assert not (data_dir / "0").exists()

    def test_deletion_runs_off_the_event_loop(self, data_dir, monkeypatch):
        (data_dir / "3").write_bytes(b"x")
        real_unlink = Path.unlink
        threads = []

        def recording_unlink(self, *args, **kwargs):
            threads.append(threading.get_ident())
            return real_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", recording_unlink)

        async def run():
            retention = RetentionScheduler(data_dir, delay_s=0)
            retention.schedule(3)
            await asyncio.sleep(0.1)
            return threading.get_ident()

        loop_thread = asyncio.run(run())
        assert len(threads) == 1
        assert threads[0] != loop_thread
        assert not (data_dir / "3").exists()

    def test_missing_file_is_ignored(self, data_dir):
        async def run():
            retention = RetentionScheduler(data_dir, delay_s=0)
            retention.schedule(5)
            await asyncio.sleep(0.05)

        asyncio.run(run())

    def test_cancel_all_keeps_files(self, data_dir):
        (data_dir / "1").write_bytes(b"x")

        async def run():
            retention = RetentionScheduler(data_dir, delay_s=0.05)
            retention.schedule(1)
            retention.cancel_all()
            await asyncio.sleep(0.1)
            return retention.pending

        assert asyncio.run(run()) == 0
        assert (data_dir / "1").exists()

    def test_reschedule_replaces_timer(self, data_dir):
        async def run():
            retention = RetentionScheduler(data_dir, delay_s=60)
            retention.schedule(2)
            retention.schedule(2)
            pending = retention.pending
            retention.cancel_all()
            return pending

        assert asyncio.run(run()) == 1

    def test_negative_delay_rejected(self, data_dir):
        with pytest.raises(ValueError):
            RetentionScheduler(data_dir, delay_s=-1)


class TestRetentionEndToEnd:

    def test_disabled_by_default(self, app):
        assert app.state.retention is None

    def test_upload_expires_after_delay(self, data_dir):
        config = AppConfig(storage=StorageConfig(data_dir=data_dir, retention_seconds=0.05))

        with TestClient(create_app(config)) as client:
            resp = client.post("/", content=b"short-lived")
            assert resp.status_code == 200
            stored = data_dir / resp.text

            deadline = time.monotonic() + 5
            while stored.exists() and time.monotonic() < deadline:
                time.sleep(0.02)

        assert not stored.exists()
