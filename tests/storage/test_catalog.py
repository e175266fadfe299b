"""Tests for keepsake.storage.catalog."""

from __future__ import annotations

import json
from pathlib import Path

import pydantic as p
import pytest

from keepsake.model import VideoRecord
from keepsake.storage.catalog import VideoCatalog


def record(title: str) -> VideoRecord:
    return VideoRecord(title=title, upload_date=1, file_size=2, video_url=f"file:///videos/{title}.mp4")


class TestVideoCatalog(object):
    @pytest.mark.anyio
    async def test_missing_file_is_empty(self, catalog: VideoCatalog) -> None:
        await catalog.load()

        assert catalog.records() == ()
        assert len(catalog) == 0

    @pytest.mark.anyio
    async def test_append_preserves_order_and_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "catalog.json"
        catalog = VideoCatalog(path)

        await catalog.append(record("one"))
        await catalog.append(record("two"))

        assert [r.title for r in catalog.records()] == ["one", "two"]
        assert [r["title"] for r in json.loads(path.read_text())] == ["one", "two"]
        assert not path.with_name("catalog.json.tmp").exists()

        reloaded = VideoCatalog(path)
        await reloaded.load()
        assert reloaded.records() == catalog.records()

    @pytest.mark.anyio
    async def test_in_memory_catalog(self) -> None:
        catalog = VideoCatalog()

        await catalog.append(record("one"))

        assert catalog.path is None
        assert len(catalog) == 1

    @pytest.mark.anyio
    async def test_invalid_records_fail_to_load(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"title": "", "upload_date": 1, "file_size": 1, "video_url": "x"}]))

        with pytest.raises(p.ValidationError):
            await VideoCatalog(path).load()
