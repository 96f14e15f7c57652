# >>> BEGIN ENGINE FILE <<<
# engine.py — HeartGate interaction engine (view-state machine)
# ---------------------------------------------------------------------
# - Three screens: password -> proposal -> gallery (gallery -> proposal via back)
# - Password gate with shake + 500 ms error flash (never clears the input)
# - Dodging "no" button: random offset inside viewport minus margin, yes grows
# - One-shot confetti burst on "yes"
# - Gallery slots with deterministic placeholder fallback per index
# - Qt-free: timers and effects are injected so tests run headless

from __future__ import annotations

import random
from typing import Callable, List, Protocol

from core.card import Card, load_card
from core.confetti import BurstSpec
from core.model import GallerySlot, Offset, Screen, SessionState, Size, Viewport

# ============================== CONSTANTS ==============================

ERROR_FLASH_MS = 500
YES_SCALE_STEP = 0.2
NO_BUTTON_MARGIN = 50.0            # keeps the "no" button fully on screen
BUTTON_EDGE_PAD = 8.0
YES_MAX_FILL = 0.5                 # share of the proposal area the yes button may take


# ============================== SEAMS ==============================

class TaskHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, ms: int, callback: Callable[[], None]) -> TaskHandle: ...


class Effects:
    """Visual side effects; the Qt window overrides these."""

    def shake(self) -> None:
        pass

    def burst(self, spec: BurstSpec) -> None:
        pass


class ManualScheduler:
    """Deterministic clock for headless use: advance(ms) fires due callbacks."""

    class _Task:
        def __init__(self, due: int, callback: Callable[[], None]):
            self.due = due
            self.callback = callback
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def __init__(self):
        self.now = 0
        self._tasks: List[ManualScheduler._Task] = []

    def call_later(self, ms: int, callback: Callable[[], None]) -> "ManualScheduler._Task":
        t = self._Task(self.now + int(ms), callback)
        self._tasks.append(t)
        return t

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.cancelled)

    def advance(self, ms: int) -> None:
        self.now += int(ms)
        due = sorted((t for t in self._tasks if t.due <= self.now), key=lambda t: t.due)
        self._tasks = [t for t in self._tasks if t.due > self.now]
        for t in due:
            if not t.cancelled:
                t.callback()


# ============================== HELPERS ==============================

def dodge_offset(viewport: Viewport, rng: random.Random,
                 margin: float = NO_BUTTON_MARGIN,
                 button: Size | None = None) -> Offset:
    """
    Random offset of the button centre from the viewport centre:
        x in [-w/2 + m, w/2 - m], y likewise,
    where m is `margin`, widened to half the button plus BUTTON_EDGE_PAD
    when the button is bigger than that, so the whole button stays inside.
    A viewport narrower than 2*m collapses that axis to 0.
    """
    def axis(extent: float, size: float) -> float:
        m = max(margin, size / 2 + BUTTON_EDGE_PAD) if size else margin
        span = max(0.0, float(extent) - 2 * m)
        return rng.random() * span - span / 2

    bw, bh = (button.width, button.height) if button else (0.0, 0.0)
    return Offset(axis(viewport.width, bw), axis(viewport.height, bh))


def fit_scale(scale: float, base: Size, area: Size) -> float:
    """
    Scale to draw the yes button at: the session scale, capped so the
    button stays within YES_MAX_FILL of the area. Never below 1.0.
    """
    if base.width <= 0 or base.height <= 0:
        return scale
    cap = min(area.width * YES_MAX_FILL / base.width,
              area.height * YES_MAX_FILL / base.height)
    return max(1.0, min(scale, cap))


def build_slots(card: Card) -> List[GallerySlot]:
    return [GallerySlot(index=i, source=card.photo_source(i))
            for i in range(1, card.photo_count + 1)]


# ============================== CONTROLLER ==============================

class ViewController:
    """
    Owns the SessionState for one window and applies every transition.

    Handlers run synchronously on the caller's thread and return True when
    the event was applied, False when it does not belong to the current
    screen. Listeners are told about every state change, including the
    deferred error clear.
    """

    def __init__(self, *, card: Card | None = None,
                 scheduler: Scheduler | None = None,
                 effects: Effects | None = None,
                 rng: random.Random | None = None,
                 state: SessionState | None = None):
        self.card = card or load_card()
        self.scheduler = scheduler or ManualScheduler()
        self.effects = effects or Effects()
        self.rng = rng or random.Random()
        self.state = state or SessionState()
        if not self.state.slots:
            self.state.slots = build_slots(self.card)
        self._listeners: List[Callable[[SessionState], None]] = []
        self._pending: List[TaskHandle] = []
        self._closed = False

    # -------- listeners --------
    def subscribe(self, fn: Callable[[SessionState], None]) -> None:
        self._listeners.append(fn)

    def _changed(self) -> None:
        for fn in list(self._listeners):
            fn(self.state)

    # -------- password --------
    def set_password(self, text: str) -> None:
        self.state.password_input = text

    def submit_password(self) -> bool:
        if self.state.screen is not Screen.PASSWORD:
            return False
        if self.state.password_input == self.card.secret:
            self.state.screen = Screen.PROPOSAL
            self._changed()
            return True

        self.state.error = True
        self.effects.shake()
        self._changed()
        # earlier clears stay scheduled; overlapping flashes may end early
        task: List[TaskHandle] = []
        task.append(self.scheduler.call_later(ERROR_FLASH_MS, lambda: self._clear_error(task[0])))
        self._pending.append(task[0])
        return False

    def _clear_error(self, task: TaskHandle) -> None:
        if task in self._pending:
            self._pending.remove(task)
        if self._closed:
            return
        self.state.error = False
        self._changed()

    # -------- proposal --------
    def dodge(self, viewport: Viewport, button: Size | None = None) -> bool:
        """`button` is the size of the "no" button; its half-size widens the edge margin."""
        if self.state.screen is not Screen.PROPOSAL:
            return False
        self.state.no_offset = dodge_offset(viewport, self.rng, button=button)
        self.state.yes_scale += YES_SCALE_STEP
        self._changed()
        return True

    def accept(self) -> bool:
        if self.state.screen is not Screen.PROPOSAL:
            return False
        self.effects.burst(BurstSpec())
        self.state.screen = Screen.GALLERY
        self._changed()
        return True

    # -------- gallery --------
    def image_failed(self, index: int) -> bool:
        slot = self.state.slot(index)
        if slot.failed:
            return False
        slot.source = self.card.placeholder_source(index)
        slot.failed = True
        self._changed()
        return True

    def back(self) -> bool:
        if self.state.screen is not Screen.GALLERY:
            return False
        self.state.screen = Screen.PROPOSAL
        self._changed()
        return True

    # -------- lifecycle --------
    @property
    def pending_tasks(self) -> int:
        return len(self._pending)

    def close(self) -> None:
        """Cancel pending deferred tasks; the controller ignores late callbacks."""
        self._closed = True
        for h in self._pending:
            h.cancel()
        self._pending.clear()

# >>> END ENGINE FILE <<<
