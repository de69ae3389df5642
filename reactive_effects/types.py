"""Type definitions for reactive-effects."""

from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

# Type variables
T = TypeVar("T")
M = TypeVar("M")  # Model type
A = TypeVar("A")  # Action type
A_contra = TypeVar("A_contra", contravariant=True)


class Reducer(Protocol[M, A]):
    """Protocol for reducer functions."""

    def __call__(self, model: M, action: A) -> Any:
        """Process an action and return the new model, or a (model, effect) pair."""
        ...


class DispatchFunc(Protocol[A_contra]):
    """Protocol for dispatch functions."""

    def __call__(self, action: A_contra) -> None:
        """Dispatch an action into the store."""
        ...


class EffectHandler(Protocol):
    """Protocol for the callback receiving non-empty effects."""

    def __call__(self, effect: Any) -> None:
        """Run or schedule the effect."""
        ...


@runtime_checkable
class EventLoop(Protocol):
    """Protocol for the concrete event loops a context can drive."""

    def schedule_async(self, fn: Callable[[], None]) -> None:
        """Queue ``fn`` to run later on the loop."""
        ...

    def finish(self) -> None:
        """Request the loop to terminate."""
        ...

    def pause(self) -> None:
        """Stop dequeuing scheduled work."""
        ...

    def resume(self) -> None:
        """Continue dequeuing scheduled work."""
        ...
