"""Effects: deferred procedures over a context, and their composition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from .actions import (
    ActionSet,
    Converter,
    as_actions,
    as_converter,
    merge_actions,
    require_compatible_actions,
    require_unique_actions,
)
from .deps import DepsSpec, deps_spec, merge_deps_spec, require_deps
from .errors import describe

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_UNSET: Any = object()


def noop(*args: Any, **kwargs: Any) -> None:
    """The effect that does nothing."""
    return None


class Effect:
    """
    A procedure run with a :class:`~reactive_effects.context.Context` after
    the model has been updated.

    An effect declares the actions it may dispatch and the dependencies it
    reads. Calling it with any context accepting those actions and providing
    those dependencies narrows the context and runs the procedure.

    Example:
        ```python
        def save(ctx: Context) -> None:
            ctx["storage"].write(ctx["model"])
            ctx.dispatch(Saved())

        save_effect = Effect(save, actions=Saved, deps={"storage", "model"})
        ```
    """

    __slots__ = ("_fn", "_actions", "_deps", "_narrows")

    def __init__(
        self,
        fn: Callable[[Context], None] | None = None,
        actions: Any = None,
        deps: Any = None,
    ) -> None:
        if fn is not None and not callable(fn):
            raise TypeError(f"Effect target must be callable, got {fn!r}")
        self._fn = fn
        self._actions: ActionSet = as_actions(actions)
        self._deps: DepsSpec = deps_spec(deps)
        self._narrows = True

    @property
    def target(self) -> Callable[[Context], None] | None:
        """The wrapped procedure."""
        return self._fn

    @property
    def actions(self) -> ActionSet:
        return self._actions

    @property
    def deps(self) -> DepsSpec:
        return self._deps

    @property
    def is_empty(self) -> bool:
        """True without target or when the target is :func:`noop` itself."""
        return self._fn is None or self._fn is noop

    def __call__(self, ctx: Context) -> None:
        if self.is_empty:
            return
        if self._narrows:
            ctx = ctx.narrow(self._actions, self._deps)
        self._fn(ctx)

    @classmethod
    def _composed(
        cls, fn: Callable[[Context], None], actions: Any, deps: Any
    ) -> Effect:
        # The parts narrow the caller's context themselves.
        composed = cls(fn, actions, deps)
        composed._narrows = False
        return composed

    def widen(self, actions: Any, deps: Any = _UNSET) -> Effect:
        """
        Re-type this effect for a context with more actions or dependencies.

        Raises:
            IncompatibleActionsError: If this effect's actions are not all
                accepted by ``actions``.
            AmbiguousActionError: If one of them is accepted by several
                members of ``actions``.
            MissingDependencyError: If ``deps`` lacks one of this effect's
                dependencies.
        """
        deps = self._deps if deps is _UNSET else deps
        require_compatible_actions(self._actions, actions)
        require_unique_actions(self._actions, actions)
        require_deps(deps, self._deps)
        if self.is_empty:
            return Effect(self._fn, actions, deps)
        return Effect._composed(self, actions, deps)

    def lift(
        self,
        actions: Any,
        deps: Any = _UNSET,
        converter: Converter | Callable[[Any], Any] | None = None,
    ) -> Effect:
        """
        Re-type this effect for a parent whose actions wrap this one's.

        Actions dispatched by the effect are passed through ``converter``
        before reaching the parent context.

        Example:
            ```python
            child_effect.lift(AppAction, converter=CounterMsg)
            ```
        """
        deps = self._deps if deps is _UNSET else deps
        conv = as_converter(converter)
        require_compatible_actions(self._actions, actions, conv)
        require_unique_actions(self._actions, actions, conv)
        require_deps(deps, self._deps)
        if self.is_empty:
            return Effect(self._fn, actions, deps)

        inner = self

        def lifted(ctx: Context) -> None:
            inner._fn(ctx.narrow(inner._actions, inner._deps, converter=conv))

        return Effect._composed(lifted, actions, deps)

    def __repr__(self) -> str:
        if self.is_empty:
            target = "noop"
        else:
            target = getattr(self._fn, "__qualname__", None) or repr(self._fn)
        deps = ", ".join(sorted(describe(d) for d in self._deps))
        return f"Effect({target}, {self._actions!r}, deps={{{deps}}})"


no_effect = Effect()


def effect(actions: Any = None, *, deps: Any = None) -> Callable[[F], Effect]:
    """
    Decorator turning a function of a context into an :class:`Effect`.

    Args:
        actions: Actions the effect may dispatch.
        deps: Dependency keys the effect reads.

    Example:
        ```python
        @effect(Saved, deps={"storage"})
        def save(ctx: Context) -> None:
            ctx["storage"].flush()
            ctx.dispatch(Saved())
        ```
    """

    def decorator(fn: F) -> Effect:
        return Effect(fn, actions, deps)

    return decorator


def is_empty_effect(value: Any) -> bool:
    """
    Whether ``value`` does nothing when run.

    Emptiness is decided by identity: ``None``, :data:`no_effect`, :func:`noop`
    or an effect wrapping :func:`noop`. Another function that happens to do
    nothing is not empty.
    """
    if value is None or value is noop:
        return True
    if isinstance(value, Effect):
        return value.is_empty
    return False


def as_effect(value: Effect | Callable[..., Any] | None) -> Effect:
    """Accept an Effect, ``None`` or :func:`noop` where an effect is expected."""
    if isinstance(value, Effect):
        return value
    if value is None or value is noop:
        return no_effect
    raise TypeError(
        f"{value!r} is not an Effect. Wrap it with Effect(fn, actions=...) "
        f"to declare the actions it dispatches."
    )


def _sequence_pair(first: Effect, second: Effect) -> Effect:
    actions = merge_actions(first.actions, second.actions)
    deps = merge_deps_spec(first.deps, second.deps)

    if first.is_empty and second.is_empty:
        return Effect(noop, actions, deps)
    if first.is_empty:
        return Effect._composed(second, actions, deps)
    if second.is_empty:
        return Effect._composed(first, actions, deps)

    def both(ctx: Context) -> None:
        first(ctx)
        second(ctx)

    return Effect._composed(both, actions, deps)


def sequence(
    first: Effect | None,
    second: Effect | None,
    *more: Effect | None,
) -> Effect:
    """
    Compose effects that run one after the other with the same context.

    The result accepts the merged actions and the union of dependencies of
    its parts. Empty parts are skipped; sequencing only empty effects yields
    an empty effect.
    Each part runs with the caller's context and narrows it to its own
    declaration, exactly as when called directly.

    Example:
        ```python
        both = sequence(save_effect, notify_effect)
        both(ctx)  # save_effect(ctx), then notify_effect(ctx)
        ```
    """
    result = _sequence_pair(as_effect(first), as_effect(second))
    for eff in more:
        result = _sequence_pair(result, as_effect(eff))
    logger.debug("Sequenced effect %r", result)
    return result
