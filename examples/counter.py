"""
Counter - Effects driven by a Textual app.

Shows:
- An event loop adapter over App.call_later / App.exit
- A nested counter reducer folded into the app reducer with Result.into
- Effects dispatching actions back through a converter
- Dependencies read by effects from the context
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel
from textual.app import App, ComposeResult
from textual.widgets import Button, Static

from reactive_effects import Context, Effect, Result, effect, invoke_reducer


LIMIT = 10


# --- State ---

class CounterModel(BaseModel):
    count: int = 0


class AppModel(BaseModel):
    counter: CounterModel = CounterModel()
    saved: int | None = None


# --- Actions ---

@dataclass
class Increment:
    pass


@dataclass
class Decrement:
    pass


@dataclass
class Reset:
    pass


CounterAction = Increment | Decrement | Reset


@dataclass
class CounterMsg:
    inner: CounterAction


@dataclass
class Save:
    pass


@dataclass
class Saved:
    count: int


@dataclass
class Quit:
    pass


AppAction = CounterMsg | Save | Saved | Quit


# --- Effects ---

reset_counter = Effect(lambda ctx: ctx.dispatch(Reset()), actions=Reset)
quit_app = Effect(lambda ctx: ctx.loop().finish())


def save_count(count: int) -> Effect:
    @effect(Saved, deps={"storage"})
    def save(ctx: Context) -> None:
        ctx["storage"]["count"] = count
        ctx.dispatch(Saved(count))

    return save


# --- Reducers ---

def counter_reducer(model: CounterModel, action) -> Result[CounterModel]:
    match action:
        case Increment():
            new = model.model_copy(update={"count": model.count + 1})
            # Wrap around once the limit is passed
            if new.count > LIMIT:
                return Result(new, reset_counter)
            return Result(new)
        case Decrement():
            return Result(model.model_copy(update={"count": model.count - 1}))
        case Reset():
            return Result(CounterModel())
    return Result(model)


def app_reducer(model: AppModel, action) -> Result[AppModel]:
    match action:
        case CounterMsg(inner=inner):
            child = counter_reducer(model.counter, inner).into(
                CounterModel, actions=AppAction, converter=CounterMsg
            )
            return Result(model.model_copy(update={"counter": child.model}), child.effect)
        case Save():
            return Result(model, save_count(model.counter.count))
        case Saved(count=count):
            return Result(model.model_copy(update={"saved": count}))
        case Quit():
            return Result(model, quit_app)
    return Result(model)


# --- Event loop adapter ---

class TextualLoop:
    """Runs scheduled work on the app's message loop."""

    def __init__(self, app: App) -> None:
        self.app = app
        self.paused = False
        self.pending: deque[Callable[[], None]] = deque()

    def schedule_async(self, fn: Callable[[], None]) -> None:
        if self.paused:
            self.pending.append(fn)
        else:
            self.app.call_later(fn)

    def finish(self) -> None:
        self.app.exit()

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False
        while self.pending:
            self.app.call_later(self.pending.popleft())


# --- App ---

class CounterApp(App):
    """Counter app - owns the model and runs effects with a shared context."""

    CSS = """
    Screen {
        align: center middle;
    }

    #display {
        width: 100%;
        height: 5;
        text-align: center;
        text-style: bold;
        background: $primary;
        content-align: center middle;
    }

    Button {
        margin: 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.model = AppModel()
        self.storage: dict[str, int] = {}
        # The context only keeps a weak reference to the loop adapter
        self.effects_loop = TextualLoop(self)
        self.context = Context(
            self.dispatch_action,
            self.effects_loop,
            {"storage": self.storage},
            actions=AppAction,
            name="counter",
        )

    def compose(self) -> ComposeResult:
        yield Static(id="display")
        yield Button("+ Increment", id="inc", variant="success")
        yield Button("- Decrement", id="dec", variant="error")
        yield Button("Reset", id="reset")
        yield Button("Save", id="save", variant="primary")
        yield Button("Quit", id="quit")

    def on_mount(self) -> None:
        self._update_display()

    def dispatch_action(self, action) -> None:
        self.effects_loop.schedule_async(lambda: self._step(action))

    def _step(self, action) -> None:
        self.model = invoke_reducer(
            app_reducer,
            self.model,
            action,
            lambda eff: eff(self.context),
            deps=self.context.deps,
        )
        self._update_display()

    def _update_display(self) -> None:
        saved = "never" if self.model.saved is None else str(self.model.saved)
        self.query_one("#display", Static).update(
            f"Count: {self.model.counter.count}  (saved: {saved})"
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "inc":
                self.context.dispatch(CounterMsg(Increment()))
            case "dec":
                self.context.dispatch(CounterMsg(Decrement()))
            case "reset":
                self.context.dispatch(CounterMsg(Reset()))
            case "save":
                self.context.dispatch(Save())
            case "quit":
                self.context.dispatch(Quit())


if __name__ == "__main__":
    CounterApp().run()
