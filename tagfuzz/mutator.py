from __future__ import annotations

import functools
import logging
import random
import re
from dataclasses import dataclass
from typing import Callable, Optional

from . import common, util

Transform = Callable[[bytes, random.Random], bytes]

DEFAULT_SEED = b'<tag attribute="value">content</tag>'

_OPENING_TAG = re.compile(rb"<([^/][^>]+)>")


@dataclass(frozen=True)
class Mutation:
    name: str
    data: bytes


def _mutate_insert_random_bytes(
    data: bytes,
    rand: random.Random,
    count: int,
    lower: int,
    upper: int,
) -> bytes:
    if len(data) < 1:
        raise common.OutOfDataError
    res = bytearray(data)
    for _ in range(count):
        pos = rand.randint(0, len(res) - 1)
        util.insert(data=res, start=pos, data_to_insert=bytes([rand.randint(lower, upper)]))
    return bytes(res)


def _mutate_inflate_identifier(
    data: bytes,
    rand: random.Random,
    identifier: bytes,
    length: int,
) -> bytes:
    return data.replace(identifier, util.random_string(rand, length))


def _mutate_replace_all(data: bytes, _rand: random.Random, old: bytes, new: bytes) -> bytes:
    return data.replace(old, new)


def _mutate_replace_first(data: bytes, _rand: random.Random, old: bytes, new: bytes) -> bytes:
    return data.replace(old, new, 1)


def _mutate_duplicate_tags(data: bytes, _rand: random.Random) -> bytes:
    return _OPENING_TAG.sub(rb"<\1><\1>", data)


def _mutate_nest_elements(_data: bytes, _rand: random.Random, depth: int) -> bytes:
    return b"<div>" * depth + b"content" + b"</div>" * depth


def _mutate_delete_range(data: bytes, rand: random.Random) -> bytes:
    if len(data) < 1:
        raise common.OutOfDataError
    start = rand.randint(0, len(data) - 1)
    end = rand.randint(start, len(data))
    res = bytearray(data)
    util.remove(data=res, start=start, length=end - start)
    return bytes(res)


def _mutate_inject_style(data: bytes, rand: random.Random) -> bytes:
    return data + b"<style>body{background-color:#%x;}</style>" % rand.randint(0, 0xFFFFFE)


def _mutate_inject_script(data: bytes, rand: random.Random) -> bytes:
    return data + b"<script>var x=%d;</script>" % rand.randint(-(2**31), 2**31 - 1)


def _quote(data: bytes) -> str:
    return repr(data)[1:]


def catalog(
    nesting_depth: int = 20,
    insert_count: int = 10,
    identifier_length: int = 50,
) -> list[tuple[str, Transform]]:
    """
    Create the default list of named mutators.

    Arguments:
    ---------
    nesting_depth:      Number of nested elements generated by the nesting mutator.
    insert_count:       Number of random bytes inserted by the insertion mutators.
    identifier_length:  Length of random strings replacing tag names, attribute names and values.
    """

    result: list[tuple[str, Transform]] = [
        (
            f"insert {insert_count} random {kind} bytes",
            functools.partial(
                _mutate_insert_random_bytes,
                count=insert_count,
                lower=lower,
                upper=upper,
            ),
        )
        for kind, lower, upper in [
            ("printable", 0x20, 0x7E),
            ("control", 0x00, 0x1E),
            ("extended", 0x80, 0xFE),
        ]
    ]

    result += [
        (
            f"inflate {_quote(identifier)}",
            functools.partial(
                _mutate_inflate_identifier,
                identifier=identifier,
                length=identifier_length,
            ),
        )
        for identifier in [b"tag", b"value", b"attribute"]
    ]

    result += [
        (
            f"replace all {_quote(old)} with {_quote(new)}",
            functools.partial(_mutate_replace_all, old=old, new=new),
        )
        for old, new in [
            (b"<", b"<<"),
            (b">", b">>"),
            (b">", b"\\>"),
            (b"<", b"\\<"),
            (b" ", b"\t"),
            (b"<", b"\x00<"),
            (b'"', b"'"),
            (b'"', b"`"),
        ]
    ]

    result += [
        (
            f"replace first {_quote(old)} with {_quote(new)}",
            functools.partial(_mutate_replace_first, old=old, new=new),
        )
        for old, new in [
            (b'"', b"'"),
            (b'"', b"`"),
            (b'"', b"\x00"),
            (b'"', b"\t"),
            (b"<", b"\x00"),
            (b"<", b"\t"),
            (b">", b"\x00"),
        ]
    ]

    result += [
        ("duplicate opening tags", _mutate_duplicate_tags),
        (
            f"nest {nesting_depth} elements",
            functools.partial(_mutate_nest_elements, depth=nesting_depth),
        ),
        ("delete random range", _mutate_delete_range),
        ("inject style block", _mutate_inject_style),
        ("inject script block", _mutate_inject_script),
    ]

    return result


class Mutator:
    def __init__(
        self,
        rand: Optional[random.Random] = None,
        mutators: Optional[list[tuple[str, Transform]]] = None,
        nesting_depth: int = 20,
    ):
        self._rand = rand if rand is not None else random.Random()  # noqa: S311
        self._mutators = (
            mutators if mutators is not None else catalog(nesting_depth=nesting_depth)
        )

    def __len__(self) -> int:
        return len(self._mutators)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._mutators]

    def generate(self, seed: bytes) -> list[Mutation]:
        """
        Apply every mutator once to seed.

        The result starts with the unmodified seed, followed by one derived input per mutator in
        registry order. Mutators that cannot handle the seed yield the seed unchanged.
        """

        seed = bytes(seed)
        result = [Mutation(name="seed", data=seed)]

        for name, mutate in self._mutators:
            try:
                data = mutate(seed, self._rand)
            except common.OutOfDataError:
                logging.debug("Input too short for '%s', using it unmodified", name)
                data = seed
            result.append(Mutation(name=name, data=bytes(data)))

        return result
