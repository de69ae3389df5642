"""
Console Todo - Effects without a UI framework.

Shows:
- A queue-based event loop implementing the loop protocol
- Effects declared with @effect and composed with sequence
- Dependencies shared through Deps
- Debug logging from reactive_effects
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from reactive_effects import (
    Context,
    Deps,
    Result,
    effect,
    invoke_reducer,
    sequence,
)


# --- State ---

class TodoModel(BaseModel):
    items: list[str] = []
    saved: int = 0


# --- Actions ---

@dataclass
class Add:
    text: str


@dataclass
class Save:
    pass


@dataclass
class Saved:
    count: int


TodoAction = Add | Save | Saved


# --- Effects ---

def write_items(items: list[str]):
    @effect(Saved, deps={"storage"})
    def write(ctx: Context) -> None:
        ctx["storage"][:] = items
        ctx.dispatch(Saved(len(items)))

    return write


@effect(deps={"log"})
def announce(ctx: Context) -> None:
    ctx["log"]("saving...")


@effect()
def stop(ctx: Context) -> None:
    ctx.loop().finish()


# --- Reducer ---

def todo_reducer(model: TodoModel, action) -> Result[TodoModel]:
    match action:
        case Add(text=text):
            return Result(model.model_copy(update={"items": [*model.items, text]}))
        case Save():
            return Result(model, sequence(announce, write_items(model.items)))
        case Saved(count=count):
            # Nothing left to do once the items are written
            return Result(model.model_copy(update={"saved": count}), stop)
    return Result(model)


# --- Event loop ---

class QueueLoop:
    """Runs scheduled callbacks in order until finished."""

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


# --- Store ---

class Store:
    """Holds the model and runs one reducer step per action."""

    def __init__(self, reducer, model: Any, loop: QueueLoop, deps: Deps) -> None:
        self.reducer = reducer
        self.model = model
        self.loop = loop
        self.context = Context(self.dispatch, loop, deps, actions=TodoAction, name="todo")

    def dispatch(self, action) -> None:
        self.loop.schedule_async(lambda: self._step(action))

    def _step(self, action) -> None:
        self.model = invoke_reducer(
            self.reducer,
            self.model,
            action,
            lambda eff: eff(self.context),
            deps=self.context.deps,
        )
        print(f"{type(action).__name__:>6} -> {self.model}")


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    storage: list[str] = []
    loop = QueueLoop()
    store = Store(todo_reducer, TodoModel(), loop, Deps(storage=storage, log=print))

    store.dispatch(Add("write docs"))
    store.dispatch(Add("release"))
    store.dispatch(Save())
    loop.run()

    print(f"storage: {storage}")


if __name__ == "__main__":
    main()
