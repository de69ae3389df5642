"""Shared fixtures: a manual event loop and a minimal store."""

from collections import deque
from typing import Any, Callable

import pytest

from reactive_effects import Context, Deps, invoke_reducer


class ManualLoop:
    """Event loop running scheduled work only when asked to."""

    def __init__(self) -> None:
        self.queue: deque[Callable[[], None]] = deque()
        self.paused = False
        self.finished = False

    def schedule_async(self, fn: Callable[[], None]) -> None:
        self.queue.append(fn)

    def finish(self) -> None:
        self.finished = True

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def run(self) -> None:
        while self.queue and not self.paused and not self.finished:
            self.queue.popleft()()


class MiniStore:
    """Store running one reducer step per dispatched action on a ManualLoop."""

    def __init__(
        self,
        reducer: Callable[[Any, Any], Any],
        model: Any,
        loop: ManualLoop,
        *,
        actions: Any = object,
        deps: dict[str, Any] | None = None,
    ) -> None:
        self.reducer = reducer
        self.model = model
        self.loop = loop
        self.deps = Deps(deps or {})
        self.dispatched: list[Any] = []
        self.context = Context(self.dispatch, loop, self.deps, actions=actions)

    def dispatch(self, action: Any) -> None:
        self.dispatched.append(action)
        self.loop.schedule_async(lambda: self._step(action))

    def _step(self, action: Any) -> None:
        self.model = invoke_reducer(
            self.reducer, self.model, action, self._run_effect, deps=self.deps
        )

    def _run_effect(self, effect: Any) -> None:
        effect(self.context)


@pytest.fixture
def loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def recorder() -> list[Any]:
    return []


@pytest.fixture
def context(loop: ManualLoop, recorder: list[Any]) -> Context:
    return Context(recorder.append, loop)
