import importlib
import json
import logging
import string
import sys
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

ReservedKeys = {
    "exception",
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "id",
    "levelname",
    "levelno",
    "lineno",
    "log_color",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def resolve_formatter(base: type[logging.Formatter] | str) -> type[logging.Formatter]:
    if not isinstance(base, str):
        return base
    module, _, name = base.rpartition(".")
    return getattr(importlib.import_module(module), name)


class ExtraFormatter(logging.Formatter):
    """
    Wraps another formatter and appends any `extra={...}` fields of the
    record as JSON, highlighted when the handler's stream is a terminal
    """

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None,
        datefmt: str | None = None,
        indent: bool | None = True,
        pyg_style: t.Type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        formatter = resolve_formatter(base)
        self.base = formatter(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.indent = indent
        self.encoder = JSONEncoder()

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if "\n" in msg:
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in set(d.keys()) - ReservedKeys}

        if not extra:
            return message

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), default=self.encoder.default)
        if self.is_tty() and not getattr(self.base, "no_color", False):
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    def is_tty(self) -> bool:
        stream = getattr(self.base, "stream", None) or sys.stderr
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
