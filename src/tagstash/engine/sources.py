# src/tagstash/engine/sources.py
"""Reading and writing the byte streams the engines work on."""

from __future__ import annotations

import sys
from pathlib import Path

from tagstash.contracts import ReadError, WriteError

STDIO = "-"


def read_source(location: str | Path) -> bytes:
    """Read a stream from a file, or from stdin for '-'.

    Raises:
        ReadError: If the source cannot be read
    """
    if str(location) == STDIO:
        return sys.stdin.buffer.read()
    path = Path(location)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ReadError(str(path), e.strerror or str(e)) from e


def write_output(location: str | Path, data: bytes) -> None:
    """Write a stream to a file, or to stdout for '-'.

    Raises:
        WriteError: If the file cannot be written
    """
    if str(location) == STDIO:
        sys.stdout.flush()
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    path = Path(location)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise WriteError(str(path), e.strerror or str(e)) from e
