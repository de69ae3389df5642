"""Contexts handed to effects: dispatch, event loop control and dependencies."""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from .actions import ActionSet, Converter, as_actions, require_compatible_actions
from .deps import Deps, as_deps
from .dispatcher import Dispatcher
from .loop import EventLoopHandle, as_loop_handle

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Context:
    """
    The capabilities available to effectful code.

    A context dispatches actions of its declared :class:`ActionSet` into the
    store, exposes the store's event loop and carries the injected
    dependencies.

    Contexts are contravariant in their actions: a context accepting
    ``Increment | Reset`` can be narrowed to one accepting only ``Increment``,
    never the other way round.

    Example:
        ```python
        def save(ctx: Context) -> None:
            ctx["storage"].write(...)
            ctx.loop().schedule_async(lambda: ctx.dispatch(Saved()))

        ctx = Context(store.enqueue, loop, Deps(storage=storage),
                      actions=AppAction)
        save(ctx.narrow(actions(Saved), deps={"storage"}))
        ```

    Note:
        A context references the store's event loop without owning it. Using
        a context after its store is gone raises
        :class:`~reactive_effects.errors.LoopReleasedError`.
    """

    __slots__ = ("_actions", "_dispatcher", "_loop", "_deps")

    def __init__(
        self,
        dispatcher: Dispatcher | Callable[[Any], None] | None,
        loop: Any,
        deps: Deps | dict[Hashable, Any] | None = None,
        *,
        actions: Any = _UNSET,
        name: str | None = None,
    ) -> None:
        """
        Create a root context.

        Args:
            dispatcher: A Dispatcher, a plain function receiving every action,
                or None for a context that cannot dispatch.
            loop: The concrete event loop, or an existing EventLoopHandle to
                share with other contexts.
            deps: Dependencies available to effects.
            actions: Accepted actions. Defaults to the dispatcher's actions,
                ``object`` for a plain function, none without dispatcher.
            name: Optional loop name for debugging.
        """
        if actions is _UNSET:
            if isinstance(dispatcher, Dispatcher):
                actions = dispatcher.actions
            elif dispatcher is not None:
                actions = object
        action_set = as_actions(None if actions is _UNSET else actions)

        if isinstance(dispatcher, Dispatcher) and dispatcher.actions == action_set:
            bound = dispatcher
        else:
            bound = Dispatcher(action_set, dispatcher)

        self._actions = action_set
        self._dispatcher = bound
        self._loop = as_loop_handle(loop, name=name)
        self._deps = as_deps(deps)

    @classmethod
    def _derive(
        cls,
        actions: ActionSet,
        dispatcher: Dispatcher,
        loop: EventLoopHandle,
        deps: Deps,
    ) -> Context:
        ctx = cls.__new__(cls)
        ctx._actions = actions
        ctx._dispatcher = dispatcher
        ctx._loop = loop
        ctx._deps = deps
        return ctx

    @property
    def actions(self) -> ActionSet:
        """The actions this context can dispatch."""
        return self._actions

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def deps(self) -> Deps:
        """The dependencies available to effects."""
        return self._deps

    def dispatch(self, action: Any) -> None:
        """
        Dispatch an action into the store.

        Raises:
            ActionNotAcceptedError: If the action is outside this context's
                actions.
        """
        self._dispatcher(action)

    def loop(self) -> EventLoopHandle:
        """The event loop shared by every context of the store."""
        return self._loop

    def __getitem__(self, key: Hashable) -> Any:
        return self._deps[key]

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._deps.get(key, default)

    def narrow(
        self,
        actions: Any = _UNSET,
        deps: Any = _UNSET,
        converter: Converter | Callable[[Any], Any] | None = None,
    ) -> Context:
        """
        Derive a context restricted to fewer actions or dependencies.

        Args:
            actions: Target actions; each must be accepted by this context,
                after ``converter`` when given. Defaults to the same actions.
            deps: Keys the derived context keeps. Defaults to all.
            converter: Transform applied to actions dispatched through the
                derived context before they reach this one.

        Returns:
            A context sharing this context's event loop.

        Raises:
            IncompatibleActionsError: If the target actions are not a
                (converted) subset of this context's actions.
            MissingDependencyError: If a requested dependency is missing.
        """
        target = self._actions if actions is _UNSET else as_actions(actions)
        require_compatible_actions(
            target,
            self._actions,
            converter,
            hint="A context can only be narrowed to actions it already accepts.",
        )
        narrowed_deps = self._deps if deps is _UNSET else self._deps.narrow(deps)

        if target == self._actions and converter is None:
            dispatcher = self._dispatcher
        else:
            dispatcher = Dispatcher(target, self._dispatcher, converter)
            logger.debug("Narrowed context %r to %r", self._actions, target)
        return Context._derive(target, dispatcher, self._loop, narrowed_deps)

    def __repr__(self) -> str:
        return f"Context({self._actions!r}, deps={sorted(map(repr, self._deps))})"
