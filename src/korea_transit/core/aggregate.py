"""Concurrent join that waits for every branch and keeps per-branch outcomes."""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one branch: either a value or the exception it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


async def _settle(awaitable: Awaitable[T]) -> Settled[T]:
    try:
        return Settled(value=await awaitable)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return Settled(error=e)


async def settle_all(*awaitables: Awaitable[Any]) -> list[Settled[Any]]:
    """Run awaitables concurrently and return one Settled per branch, in order.

    A failing branch never cancels the others.
    """
    return list(await asyncio.gather(*(_settle(a) for a in awaitables)))
