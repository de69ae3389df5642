"""Exceptions raised when actions, effects, contexts and results are composed."""

from __future__ import annotations

from typing import Any, Iterable


def describe(descriptor: Any) -> str:
    """Readable name for an action descriptor."""
    if isinstance(descriptor, type):
        return descriptor.__qualname__
    return repr(descriptor)


def _describe_all(descriptors: Iterable[Any]) -> str:
    return "{" + ", ".join(describe(d) for d in descriptors) + "}"


class ReactiveEffectsError(Exception):
    """Base class for all errors raised by reactive_effects."""


class IncompatibleActionsError(ReactiveEffectsError, TypeError):
    """Raised when one action set cannot be used where another is expected."""

    def __init__(
        self,
        source: Iterable[Any],
        target: Iterable[Any],
        hint: str | None = None,
    ) -> None:
        self.source = tuple(source)
        self.target = tuple(target)
        self.hint = hint
        message = (
            f"Actions {_describe_all(self.source)} are not compatible with "
            f"{_describe_all(self.target)}."
        )
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class NoMatchingActionError(IncompatibleActionsError):
    """Raised when no candidate accepts an action type."""

    def __init__(self, action_type: Any, candidates: Iterable[Any]) -> None:
        self.action_type = action_type
        self.candidates = tuple(candidates)
        super().__init__(
            (action_type,),
            self.candidates,
            hint=f"No candidate accepts {describe(action_type)}.",
        )


class AmbiguousActionError(IncompatibleActionsError):
    """Raised when more than one candidate accepts an action type."""

    def __init__(
        self,
        action_type: Any,
        candidates: Iterable[Any],
        matches: Iterable[Any],
    ) -> None:
        self.action_type = action_type
        self.candidates = tuple(candidates)
        self.matches = tuple(matches)
        super().__init__(
            (action_type,),
            self.candidates,
            hint=(
                f"{describe(action_type)} is accepted by several candidates "
                f"{_describe_all(self.matches)}; exactly one is required."
            ),
        )


class ActionNotAcceptedError(ReactiveEffectsError, TypeError):
    """Raised when dispatching an action that no slot accepts."""

    def __init__(self, action: Any, accepted: Iterable[Any]) -> None:
        self.action = action
        self.accepted = tuple(accepted)
        if self.accepted:
            detail = f"expected one of {_describe_all(self.accepted)}"
        else:
            detail = "this dispatcher accepts no actions"
        super().__init__(f"Cannot dispatch {action!r}: {detail}.")


class MissingDependencyError(ReactiveEffectsError, KeyError):
    """Raised when a dependency bag lacks required keys."""

    def __init__(
        self,
        missing: Iterable[Any],
        available: Iterable[Any] = (),
        hint: str | None = None,
    ) -> None:
        self.missing = frozenset(missing)
        self.available = frozenset(available)
        self.hint = hint
        names = ", ".join(sorted(repr(key) for key in self.missing))
        message = f"Missing dependencies: {names}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class IncompatibleModelError(ReactiveEffectsError, TypeError):
    """Raised when a nested result's model cannot become the parent's model."""

    def __init__(self, model: Any, model_type: Any) -> None:
        self.model = model
        self.model_type = model_type
        super().__init__(
            f"The model {model!r} is not convertible to {describe(model_type)}."
        )


class ConverterError(ReactiveEffectsError, TypeError):
    """Raised when a converter's result type cannot be determined."""


class InvalidEventLoopError(ReactiveEffectsError, TypeError):
    """Raised when an object does not implement the event loop protocol."""

    def __init__(self, loop: Any, missing: Iterable[str]) -> None:
        self.loop = loop
        self.missing = tuple(missing)
        super().__init__(
            f"{type(loop).__name__} is not an event loop: missing "
            f"{', '.join(self.missing)}."
        )


class LoopReleasedError(ReactiveEffectsError, RuntimeError):
    """Raised when using an event loop handle after its store went away."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        label = f" '{name}'" if name else ""
        super().__init__(
            f"Event loop{label} has been released. Contexts must not be used "
            f"after the store that created them is destroyed."
        )
