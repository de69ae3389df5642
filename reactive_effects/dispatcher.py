"""Routing tables from action types to the procedures handling them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from .actions import (
    ActionSet,
    ConversionRegistry,
    Converter,
    as_actions,
    as_converter,
    convert_action,
    find_convertible_action,
    is_convertible,
)
from .errors import ActionNotAcceptedError, AmbiguousActionError, describe

logger = logging.getLogger(__name__)

Slot = Callable[[Any], None]

# Convertibility without registered conversions: the instance passes as is.
_STRUCTURAL = ConversionRegistry()


def _ignore(action: Any) -> None:
    return None


class Dispatcher:
    """
    A callable accepting every action of its :class:`ActionSet`.

    Each declared action type owns one slot. Slots are bound at construction:

    * ``Dispatcher(actions)`` ignores every action;
    * ``Dispatcher(actions, other_dispatcher)`` binds each type to the one
      slot of ``other_dispatcher`` accepting it;
    * ``Dispatcher(actions, fn)`` routes every type to ``fn``;
    * ``converter=`` transforms actions before they reach the source, and
      slots are looked up by the converter's result type.

    Binding a slot that no source slot accepts, or that several accept,
    raises at construction rather than when dispatching.

    Example:
        ```python
        root = Dispatcher(Increment | Reset, store.enqueue)
        narrow = Dispatcher(actions(Increment), root)
        narrow(Increment())  # reaches store.enqueue
        ```
    """

    __slots__ = ("_actions", "_slots", "_routes")

    def __init__(
        self,
        actions: Any = None,
        target: Dispatcher | Slot | None = None,
        converter: Converter | Callable[[Any], Any] | None = None,
    ) -> None:
        self._actions: ActionSet = as_actions(actions)
        conv = None if converter is None else as_converter(converter)

        if target is None:
            slots = {t: _ignore for t in self._actions}
        elif isinstance(target, Dispatcher):
            slots = {t: target._bind(t, conv) for t in self._actions}
        elif callable(target):
            slots = {t: _through(target, conv) for t in self._actions}
        else:
            raise TypeError(f"{target!r} cannot dispatch actions")

        self._slots: dict[Any, Slot] = slots
        self._routes: dict[type, Slot] = {}
        logger.debug("Dispatcher bound for %r", self._actions)

    @classmethod
    def from_handlers(cls, handlers: Mapping[Any, Slot]) -> Dispatcher:
        """
        Build a dispatcher with one handler per action type.

        Example:
            ```python
            Dispatcher.from_handlers({Increment: on_increment, Reset: on_reset})
            ```
        """
        dispatcher = cls(tuple(handlers))
        dispatcher._slots = dict(handlers)
        return dispatcher

    @property
    def actions(self) -> ActionSet:
        return self._actions

    def _bind(self, action_type: Any, converter: Converter | None) -> Slot:
        """The procedure to bind for ``action_type`` in a derived dispatcher."""
        source_type = (
            action_type if converter is None else converter.result_type(action_type)
        )
        match = find_convertible_action(source_type, self._actions)
        slot = self._slots[match]
        structural = is_convertible(source_type, match, _STRUCTURAL)

        if converter is None:
            if structural:
                return slot
            return lambda action: slot(convert_action(action, match))
        if structural:
            return lambda action: slot(converter(action))
        return lambda action: slot(convert_action(converter(action), match))

    def with_actions(
        self,
        actions: Any,
        converter: Converter | Callable[[Any], Any] | None = None,
    ) -> Dispatcher:
        """Derive a dispatcher for another, compatible action set."""
        return Dispatcher(actions, self, converter)

    def _match(self, action_type: type) -> Any:
        if action_type in self._slots:
            return action_type
        for base in action_type.__mro__[1:-1]:
            if base in self._slots:
                return base

        matches = [t for t in self._slots if is_convertible(action_type, t)]
        if len(matches) > 1:
            matches = [t for t in matches if t is not object and t is not Any]
        if not matches:
            return None
        if len(matches) > 1:
            raise AmbiguousActionError(action_type, self._actions, matches)
        return matches[0]

    def _route(self, action_type: type) -> Slot | None:
        route = self._routes.get(action_type)
        if route is not None:
            return route

        slot_type = self._match(action_type)
        if slot_type is None:
            return None
        slot = self._slots[slot_type]
        if is_convertible(action_type, slot_type, _STRUCTURAL):
            route = slot
        else:
            route = lambda action: slot(convert_action(action, slot_type))  # noqa: E731
        self._routes[action_type] = route
        return route

    def accepts(self, action_type: type) -> bool:
        """Whether actions of ``action_type`` can be dispatched."""
        try:
            return self._match(action_type) is not None
        except AmbiguousActionError:
            return False

    def __call__(self, action: Any) -> None:
        route = self._route(type(action))
        if route is None:
            raise ActionNotAcceptedError(action, self._actions)
        route(action)

    def __repr__(self) -> str:
        members = ", ".join(describe(t) for t in self._actions)
        return f"Dispatcher({members})"


def _through(fn: Slot, converter: Converter | None) -> Slot:
    if converter is None:
        return fn
    return lambda action: fn(converter(action))
