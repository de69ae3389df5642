"""Event loop handle shared by every context derived from one store."""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable

from .errors import InvalidEventLoopError, LoopReleasedError
from .types import EventLoop

logger = logging.getLogger(__name__)

LOOP_METHODS = tuple(
    name
    for name, value in vars(EventLoop).items()
    if not name.startswith("_") and callable(value)
)


class EventLoopHandle:
    """
    Non-owning adapter exposing a concrete event loop to effects.

    Any object with ``schedule_async``, ``finish``, ``pause`` and ``resume``
    methods can be adapted. The handle does not keep the loop alive: the loop
    belongs to the store, and once it is garbage collected, or the store calls
    :meth:`release`, every operation raises :class:`LoopReleasedError`.

    Example:
        ```python
        loop = ManualLoop()
        handle = EventLoopHandle(loop, name="main")
        handle.schedule_async(lambda: print("later"))
        handle.release()  # store shutting down
        handle.pause()    # raises LoopReleasedError
        ```
    """

    __slots__ = ("_ref", "_name", "__weakref__")

    def __init__(self, loop: EventLoop, *, name: str | None = None) -> None:
        """
        Adapt a concrete loop.

        Args:
            loop: The loop to drive.
            name: Optional name for debugging.

        Raises:
            InvalidEventLoopError: If the loop lacks one of the operations.
        """
        if not isinstance(loop, EventLoop):
            missing = [m for m in LOOP_METHODS if not hasattr(loop, m)]
            raise InvalidEventLoopError(loop, missing)

        try:
            ref: Callable[[], Any] | None = weakref.ref(loop)
        except TypeError:
            # Objects without __weakref__ slot are held until released.
            ref = lambda: loop  # noqa: E731
        self._ref = ref
        self._name = name

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def released(self) -> bool:
        """Whether the underlying loop can no longer be used."""
        return self._ref is None or self._ref() is None

    def _loop(self) -> EventLoop:
        loop = self._ref() if self._ref is not None else None
        if loop is None:
            raise LoopReleasedError(self._name)
        return loop

    def schedule_async(self, fn: Callable[[], None]) -> None:
        """Queue ``fn`` on the loop; ordering is whatever the loop provides."""
        self._loop().schedule_async(fn)

    def finish(self) -> None:
        """Request loop termination."""
        logger.debug("Finishing event loop %s", self._name or "unnamed")
        self._loop().finish()

    def pause(self) -> None:
        """Stop dequeuing scheduled work; running work is not cancelled."""
        self._loop().pause()

    def resume(self) -> None:
        self._loop().resume()

    def release(self) -> None:
        """Detach from the loop. Called by the owning store on shutdown."""
        self._ref = None

    def __repr__(self) -> str:
        name = f"name={self._name!r}" if self._name else ""
        state = "released" if self.released else "active"
        return f"EventLoopHandle({name}{', ' if name else ''}{state})"


def as_loop_handle(loop: Any, *, name: str | None = None) -> EventLoopHandle:
    """Reuse an existing handle, or adapt a concrete loop."""
    if isinstance(loop, EventLoopHandle):
        return loop
    return EventLoopHandle(loop, name=name)
