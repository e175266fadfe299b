from __future__ import annotations

import base64
import datetime
import enum
import functools
import json as pyjson
import pathlib
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


# encoders
def encode_bytes(obj: bytes) -> str:
    return base64.b64encode(obj).decode("utf8")


def encode_set(obj: set[t.Any]) -> list[t.Any]:
    return list(obj)


def encode_datetime(obj: datetime.datetime) -> str:
    return obj.isoformat()


def encode_date(obj: datetime.date) -> str:
    return obj.isoformat()


def encode_enum(obj: enum.Enum) -> str:
    return obj.value


def encode_path(obj: pathlib.Path) -> str:
    return str(obj)


def encode_pydantic(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


def encode_timedelta(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


@functools.cache
def _encoder_map() -> dict[type, t.Callable[[t.Any], JSONValue]]:
    return {
        bytes: encode_bytes,
        datetime.datetime: encode_datetime,
        datetime.date: encode_date,
        datetime.timedelta: encode_timedelta,
        enum.Enum: encode_enum,
        pathlib.Path: encode_path,
        set: encode_set,
    }


# stdlib-compatible JSON encoder
class JSONEncoder(pyjson.JSONEncoder):
    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        return _encoder_map()

    def default(self, o: t.Any) -> JSONValue:
        if isinstance(o, p.BaseModel):
            return encode_pydantic(o)

        encoders = self.get_encoders()
        for tp in encoders:
            if isinstance(o, tp):
                return encoders[tp](o)

        return pyjson.JSONEncoder.default(self, o)

