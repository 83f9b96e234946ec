from __future__ import annotations

import itertools
import random
import sys
from pathlib import Path
from typing import Optional

EXAMPLES = Path(__file__).parent.parent / "examples"


def do_raise(e: type[BaseException], cond: bool = True, message: Optional[str] = None) -> None:
    if cond:
        raise e(message)


def python(script: str, *args: str) -> list[str]:
    return [sys.executable, str(EXAMPLES / script / "target.py"), *args]


class StaticRand(random.Random):
    """Random source returning the given values in turn, starting over when exhausted."""

    def __init__(self, *values: int) -> None:
        super().__init__()
        self._values = itertools.cycle(values)

    def randint(self, a: int, b: int) -> int:  # noqa: ARG002
        return next(self._values)


def test_static_rand() -> None:
    r = StaticRand(1, 2)
    assert [r.randint(0, 10) for _ in range(5)] == [1, 2, 1, 2, 1]
