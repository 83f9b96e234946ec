from __future__ import annotations

import random
import shlex
import shutil
import string
from pathlib import Path
from typing import Sequence, Union

from . import common

Command = Union[str, Sequence[str]]


def remove(data: bytearray, start: int, length: int) -> None:
    """
    Remove part of a bytearray.

    Arguments:
    ---------
    data: bytearray to modify.
    start: Start position of chunk to remove (inclusive).
    length: Number of bytes to remove.
    """
    if start >= len(data):
        raise common.OutOfBoundsError(f"Start out of range ({start=}, length={len(data)})")
    if start + length > len(data):
        raise common.OutOfBoundsError(
            f"End out of range (end={start + length - 1}, length={len(data)})",
        )
    data[:] = data[:start] + data[start + length :]


def insert(data: bytearray, start: int, data_to_insert: bytes) -> None:
    """
    Insert data into bytearray.

    Arguments:
    ---------
    data: bytearray to modify.
    start: Position where to insert new data.
    data_to_insert: bytearray to insert.
    """
    if start > len(data):
        raise common.OutOfBoundsError("Start out of range")
    data[:] = data[:start] + data_to_insert + data[start:]


def random_string(rand: random.Random, length: int) -> bytes:
    """Return a string of random lowercase letters (a-z)."""
    return bytes(
        ord(string.ascii_lowercase[rand.randint(0, len(string.ascii_lowercase) - 1)])
        for _ in range(length)
    )


def locate(command: Command, working_dir: Path) -> Path:
    """
    Find the executable of a command.

    The first word of the command must either exist relative to the working directory or be
    found on the search path.

    Arguments:
    ---------
    command: Shell command line or argument list.
    working_dir: Directory the command will be executed in.
    """
    try:
        words = shlex.split(command) if isinstance(command, str) else list(command)
    except ValueError as e:
        raise common.ConfigurationError(f"Invalid command: {e}") from e
    if not words:
        raise common.ConfigurationError("Empty command.")

    candidate = working_dir / words[0]
    if candidate.exists():
        return candidate

    found = shutil.which(words[0])
    if found is None:
        raise common.ConfigurationError(f"Could not find command '{words[0]}'.")
    return Path(found)


def indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line for line in text.split("\n"))


def printable(data: bytes) -> bool:
    return all(32 <= b < 127 or b in b"\t\n\r" for b in data)


def hexdump(title: str, data: bytes) -> str:
    length = 16
    result = [title]
    for i in range(0, len(data), length):
        chunk = data[i : i + length]
        hex_chunk = " ".join(f"{b:02x}" for b in chunk)
        ascii_chunk = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        result.append(f"{i:08x}: {hex_chunk:<{length*3}} {ascii_chunk}")
    return "\n".join(result)
