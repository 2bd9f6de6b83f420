"""
Loading context: the ambient state of one pack load.

While a pack loads, decoders can reach the active :class:`LoadingContext`
through :func:`get_context` to draw from the load's seeded random stream or to
register a finisher that runs once the complete pack exists. The context lives
in a :class:`contextvars.ContextVar`, so every thread or asyncio task running
its own load sees only its own context.

Usage:
    with active_load(seed=0) as context:
        pack = build_pack(...)
        context.finish(pack)
"""

import contextvars
import logging
import random
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Generic, Iterator, Optional, TypeVar

from .errors import ContextError

T = TypeVar("T")

STATIC_SEED = 0

logger = logging.getLogger(__name__)


class FinishHandle:
    """Handed to each finisher; gives access to the completed pack."""

    __slots__ = ("_pack",)

    def __init__(self, pack: Any):
        self._pack = pack

    @property
    def pack(self) -> Any:
        return self._pack


Finisher = Callable[[FinishHandle], None]


class LoadingContext:
    """Random stream and finisher queue of one in-flight pack load.

    Attributes:
        seed: Seed of the random stream
    """

    def __init__(self, seed: int = STATIC_SEED):
        self.seed = seed
        self._random = random.Random(seed)
        self._finishers: Deque[Finisher] = deque()
        self._draining = False
        self._finished = False
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def random(self) -> random.Random:
        """Random stream shared by every decode of this load."""
        return self._random

    @property
    def is_static(self) -> bool:
        return False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def pending(self) -> int:
        """Number of finishers waiting to run."""
        return len(self._finishers)

    def register_finisher(self, finisher: Finisher) -> None:
        """Queue ``finisher`` to run after the pack is assembled.

        Raises:
            ContextError: If the context was already drained
        """
        if self._finished and not self._draining:
            raise ContextError("Cannot register a finisher after the load has finished")
        self._finishers.append(finisher)

    def finish(self, pack: Any) -> None:
        """Run every queued finisher in registration order against ``pack``.

        Finishers registered while draining run in the same pass, after the
        ones already queued.

        Raises:
            ContextError: If called a second time
        """
        if self._finished:
            raise ContextError("Loading context has already been finished")
        self._finished = True
        self._draining = True
        handle = FinishHandle(pack)
        count = 0
        try:
            while self._finishers:
                finisher = self._finishers.popleft()
                finisher(handle)
                count += 1
        finally:
            self._draining = False
        self.logger.debug(f"Ran {count} finishers")


class StaticContext(LoadingContext):
    """Context seen outside any load.

    Each access to :attr:`random` returns a fresh stream with the fixed static
    seed, so results are reproducible. Registering a finisher is an error.
    """

    def __init__(self):
        super().__init__(STATIC_SEED)

    @property
    def random(self) -> random.Random:
        return random.Random(STATIC_SEED)

    @property
    def is_static(self) -> bool:
        return True

    def register_finisher(self, finisher: Finisher) -> None:
        raise ContextError("Not in a pack loading context")

    def finish(self, pack: Any) -> None:
        raise ContextError("The static loading context cannot be finished")


STATIC_CONTEXT = StaticContext()

_current: contextvars.ContextVar[Optional[LoadingContext]] = contextvars.ContextVar(
    "datapack_loading_context", default=None
)


def get_context() -> LoadingContext:
    """Return the active loading context, or the static one outside a load."""
    context = _current.get()
    return STATIC_CONTEXT if context is None else context


@contextmanager
def active_load(seed: int = STATIC_SEED) -> Iterator[LoadingContext]:
    """Activate a fresh :class:`LoadingContext` for the enclosed block.

    The context is deactivated on exit. If the block raises, queued finishers
    are discarded without running.

    Raises:
        ContextError: If a load is already active in the current context
    """
    if _current.get() is not None:
        raise ContextError("A pack load is already active in this context")
    context = LoadingContext(seed)
    token = _current.set(context)
    try:
        yield context
    except BaseException:
        if context.pending:
            logger.debug(f"Discarding {context.pending} finishers of an aborted load")
        raise
    finally:
        _current.reset(token)


class Deferred(Generic[T]):
    """Write-once cell filled in by a finisher.

    Used for values that can only be resolved against the completed pack.
    Records holding a cell exclude it from comparison.
    """

    __slots__ = ("_value", "_set")

    def __init__(self):
        self._value: Optional[T] = None
        self._set = False

    def __repr__(self) -> str:
        return f"Deferred({self._value!r})" if self._set else "Deferred(<unresolved>)"

    @property
    def resolved(self) -> bool:
        return self._set

    def set(self, value: T) -> None:
        """Fill the cell.

        Raises:
            ContextError: If the cell was already filled
        """
        if self._set:
            raise ContextError("Deferred value has already been resolved")
        self._value = value
        self._set = True

    def get(self) -> T:
        """Return the resolved value.

        Raises:
            ContextError: If no finisher filled the cell yet
        """
        if not self._set:
            raise ContextError("Deferred value is not resolved yet")
        return self._value  # type: ignore[return-value]
