"""
Remote-first, local-fallback execution.

Every public operation runs through ``dual_mode``: probe the backend, try the
remote call, and on any ``RemoteError`` (or an unavailable probe) run the
local implementation instead. The outcome records which tier served it and,
when the local tier did, why the remote one was skipped.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar, Union

from loguru import logger

from entprep.core.errors import RemoteError

T = TypeVar("T")

REMOTE_UNAVAILABLE = "remote unavailable"


class Tier(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class Served(Generic[T]):
    """Result of a dual-mode operation."""

    data: T
    served_by: Tier
    failure: str | None = None

    @property
    def demo(self) -> bool:
        """True when the content is a local stand-in rather than live service output."""
        return self.served_by is Tier.LOCAL


async def dual_mode(
    operation: str,
    probe: Callable[[], Awaitable[bool]],
    remote: Callable[[], Awaitable[T]],
    local: Callable[[], Union[T, Awaitable[T]]],
) -> Served[T]:
    """
    Run ``remote`` if the probe says the backend is up, else ``local``.

    Remote failures are never raised. Exceptions from ``local`` propagate:
    there is no tier beneath it.
    """
    failure: str
    if await probe():
        try:
            data = await remote()
            logger.debug(f"{operation}: served by remote")
            return Served(data=data, served_by=Tier.REMOTE)
        except RemoteError as e:
            failure = str(e) or type(e).__name__
            logger.warning(f"{operation}: remote failed ({failure}), using local fallback")
    else:
        failure = REMOTE_UNAVAILABLE
        logger.debug(f"{operation}: remote unavailable, using local fallback")

    result = local()
    if inspect.isawaitable(result):
        result = await result
    return Served(data=result, served_by=Tier.LOCAL, failure=failure)
