"""Append-only catalog of uploaded videos for the store-backed actor."""

from __future__ import annotations

import logging
import typing as t
from pathlib import Path

import pydantic as p

from keepsake.model import VideoRecord

logger = logging.getLogger(__name__)

_Records = p.TypeAdapter(list[VideoRecord])


class VideoCatalog(object):
    """Ordered list of VideoRecords, optionally persisted to a JSON file.

    Records are only ever appended. The file is rewritten through a temporary
    sibling and an atomic replace, so a crash never leaves a half-written
    catalog.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._records: list[VideoRecord] = []
        self._loaded = path is None

    @property
    def path(self) -> Path | None:
        return self._path

    async def load(self) -> None:
        if self._loaded:
            return
        assert self._path is not None
        if self._path.exists():
            self._records = _Records.validate_json(self._path.read_bytes())
        self._loaded = True
        logger.debug("loaded video catalog", extra={"path": self._path, "count": len(self._records)})

    def records(self) -> tuple[VideoRecord, ...]:
        return tuple(self._records)

    async def append(self, record: VideoRecord) -> None:
        await self.load()
        records = [*self._records, record]
        if self._path is not None:
            self._write(records)
        self._records = records

    def _write(self, records: t.Sequence[VideoRecord]) -> None:
        assert self._path is not None
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(f"{self._path.name}.tmp")
        tmp.write_bytes(_Records.dump_json(list(records), indent=2))
        tmp.replace(self._path)

    def __len__(self) -> int:
        return len(self._records)
