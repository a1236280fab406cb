from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeAlias, TypeVar

T = TypeVar("T")

Operation: TypeAlias = Callable[[], Awaitable[T]]
Sleeper: TypeAlias = Callable[[float], Awaitable[None]]
