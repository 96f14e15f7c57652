# ============================================================================
#  HEARTGATE — a password-gated greeting card
#.
#├── app.py              Qt window + screens (this file)
#├── engine.py           view-state machine (Qt-free)
#├── config
#│   └── card.json       secret, copy, image paths
#├── core
#│   ├── card.py         card loader + cache
#│   ├── confetti.py     particle burst physics
#│   └── model.py        session state
#├── images              photo1.jpg … photo8.jpg
#├── lore
#│   └── lorekeeper.py   append-only event ledger
#└── tests
# ============================================================================

import os, sys, math, random
from pathlib import Path
try:
    APP_DIR = str(Path(__file__).resolve().parent)
except NameError:
    APP_DIR = str(Path.cwd())
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from PySide6.QtGui import QColor, QFont, QPainter, QPixmap, QBrush, QGuiApplication
from PySide6.QtCore import (Qt, QTimer, QPoint, QRect, QUrl, Signal, QSettings,
    QPropertyAnimation, QVariantAnimation, QEasingCurve, QSequentialAnimationGroup,
    QPauseAnimation, QAbstractAnimation)
from PySide6.QtWidgets import (QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QGridLayout, QLabel, QPushButton, QLineEdit, QStackedWidget, QScrollArea, QFrame,
    QGraphicsOpacityEffect, QMessageBox, QSizePolicy, QLayout)
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkRequest, QNetworkReply

from lore import lorekeeper
from lore.lorekeeper import log_event, lore_guard, dbg
from core.card import Card, CardError, load_card
from core.confetti import BurstSpec, launch, step
from core.model import Screen, SessionState, Size, Viewport
from engine import Effects, ViewController, fit_scale

APP_FRIENDLY_NAME = "HeartGate"
FRAME_MS = 16

# ---- palette ----------------------------------------------------------------
PINK_BG = "#fff0f5"
PINK = "#ec4899"
PINK_DARK = "#db2777"
PINK_SOFT = "#fbcfe8"
RED = "#ef4444"
RED_DARK = "#dc2626"

CARD_CSS = f"""
    QFrame#card {{
        background: rgba(255,255,255,0.85);
        border: 2px solid {PINK_SOFT};
        border-radius: 24px;
    }}
"""
INPUT_CSS = """
    QLineEdit {{
        border: 2px solid {border};
        border-radius: 12px;
        padding: 10px 14px;
        font-size: 20px;
        letter-spacing: 4px;
        background: {bg};
    }}
"""
SUBMIT_CSS = f"""
    QPushButton {{
        background: {PINK}; color: white; font-weight: 700;
        border: 0; border-radius: 12px; padding: 12px;
    }}
    QPushButton:hover {{ background: {PINK_DARK}; }}
"""
NO_CSS = """
    QPushButton {
        background: #e5e7eb; color: #6b7280; font-size: 17px; font-weight: 500;
        border: 2px solid #d1d5db; border-radius: 22px; padding: 10px 30px;
    }
"""
LINK_CSS = f"""
    QPushButton {{ color: #f472b6; background: transparent; border: 0;
                   text-decoration: underline; font-size: 15px; }}
    QPushButton:hover {{ color: {PINK_DARK}; }}
"""


# -------------------------- Timers for the engine --------------------------
class _QtTask:
    def __init__(self, timer: QTimer):
        self._timer = timer
        self.done = False

    def cancel(self) -> None:
        if self.done:
            return
        self.done = True
        self._timer.stop()
        self._timer.deleteLater()


class QtScheduler:
    """engine.Scheduler backed by single-shot QTimers parented to a widget."""
    def __init__(self, parent):
        self._parent = parent

    def call_later(self, ms, callback):
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        task = _QtTask(timer)

        def fire():
            task.done = True
            timer.deleteLater()
            callback()

        timer.timeout.connect(fire)
        timer.start(int(ms))
        return task


def _fade_in(widget: QWidget, ms: int = 350, delay: int = 0):
    """Opacity 0 → 1; the effect is removed when done so nested effects never stack."""
    eff = QGraphicsOpacityEffect(widget)
    eff.setOpacity(0.0)
    widget.setGraphicsEffect(eff)
    anim = QPropertyAnimation(eff, b"opacity", widget)
    anim.setDuration(ms)
    anim.setStartValue(0.0)
    anim.setEndValue(1.0)
    anim.setEasingCurve(QEasingCurve.Type.OutCubic)
    anim.finished.connect(lambda: widget.setGraphicsEffect(None))
    if delay:
        seq = QSequentialAnimationGroup(widget)
        seq.addAnimation(QPauseAnimation(delay, seq))
        seq.addAnimation(anim)
        seq.start(QAbstractAnimation.DeletionPolicy.DeleteWhenStopped)
    else:
        anim.start(QAbstractAnimation.DeletionPolicy.DeleteWhenStopped)


# -------------------------- Password screen --------------------------
class PasswordScreen(QWidget):
    def __init__(self, controller: ViewController, card: Card, parent=None):
        super().__init__(parent)
        self.controller = controller

        self.frame = QFrame(self)
        self.frame.setObjectName("card")
        self.frame.setStyleSheet(CARD_CSS)
        self.frame.setFixedWidth(400)

        lock = QLabel("🔒")
        lock.setAlignment(Qt.AlignmentFlag.AlignCenter)
        lock.setStyleSheet(f"font-size:34px; background:{PINK_SOFT}; border-radius:32px; padding:12px;")
        lock.setFixedSize(64, 64)

        title = QLabel(card.text("password_title"))
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet(f"font-size:30px; font-weight:700; color:{PINK_DARK}; background:transparent;")

        hint = QLabel(card.text("password_hint"))
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        hint.setWordWrap(True)
        hint.setStyleSheet("font-style:italic; color:#f472b6; background:transparent;")

        # the input sits in a plain holder so the shake can move it freely
        self.input_holder = QWidget()
        self.input_holder.setFixedHeight(52)
        self.input = QLineEdit(self.input_holder)
        self.input.setPlaceholderText(card.text("password_placeholder"))
        self.input.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.input.textChanged.connect(self.controller.set_password)
        self.input.returnPressed.connect(self.on_submit)

        self.submit = QPushButton(card.text("password_submit"))
        self.submit.setCursor(Qt.PointingHandCursor)
        self.submit.setStyleSheet(SUBMIT_CSS)
        self.submit.clicked.connect(self.on_submit)

        lay = QVBoxLayout(self.frame)
        lay.setContentsMargins(32, 32, 32, 32)
        lay.setSpacing(12)
        lay.addWidget(lock, 0, Qt.AlignmentFlag.AlignHCenter)
        lay.addWidget(title)
        lay.addWidget(hint)
        lay.addSpacing(8)
        lay.addWidget(self.input_holder)
        lay.addWidget(self.submit)

        outer = QVBoxLayout(self)
        outer.addStretch(1)
        outer.addWidget(self.frame, 0, Qt.AlignmentFlag.AlignHCenter)
        outer.addStretch(1)

        self._shake_anim = None
        self.render(controller.state)

    def resizeEvent(self, e):  # type: ignore[override]
        super().resizeEvent(e)
        QTimer.singleShot(0, self._home_input)

    def _home_input(self):
        self.input.setGeometry(0, 0, self.input_holder.width(), self.input_holder.height())

    @lore_guard("password submit failure")
    def on_submit(self):
        self.controller.submit_password()

    def shake(self):
        """x: -10, 10, -10, 10, 0 over 400 ms."""
        if self._shake_anim is not None:
            self._shake_anim.stop()
        self._home_input()
        anim = QPropertyAnimation(self.input, b"pos", self)
        anim.setDuration(400)
        for t, dx in ((0.0, 0), (0.2, -10), (0.4, 10), (0.6, -10), (0.8, 10), (1.0, 0)):
            anim.setKeyValueAt(t, QPoint(dx, 0))
        anim.start()
        self._shake_anim = anim

    def render(self, state: SessionState):
        if state.error:
            css = INPUT_CSS.format(border="#f87171", bg="#fef2f2")
        else:
            css = INPUT_CSS.format(border=PINK_SOFT, bg="rgba(253,242,248,0.5)")
        self.input.setStyleSheet(css)


# -------------------------- Proposal screen --------------------------
class DodgeButton(QPushButton):
    """Emits `dodged` on hover-enter and on click."""
    dodged = Signal()

    def __init__(self, text, parent=None):
        super().__init__(text, parent)
        self.clicked.connect(lambda: self.dodged.emit())

    def enterEvent(self, e):  # type: ignore[override]
        super().enterEvent(e)
        self.dodged.emit()


class PulseHeart(QLabel):
    """Heart glyph that breathes 1 → 1.1 → 1 every 2 s."""
    BASE_PX = 88

    def __init__(self, parent=None):
        super().__init__("❤", parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setFixedHeight(int(self.BASE_PX * 1.4))
        self._anim = QVariantAnimation(self)
        self._anim.setDuration(2000)
        self._anim.setKeyValueAt(0.0, 1.0)
        self._anim.setKeyValueAt(0.5, 1.1)
        self._anim.setKeyValueAt(1.0, 1.0)
        self._anim.setLoopCount(-1)
        self._anim.valueChanged.connect(self._apply)
        self._apply(1.0)
        self._anim.start()

    def _apply(self, scale):
        self.setStyleSheet(f"color:{RED}; font-size:{int(self.BASE_PX * float(scale))}px;")


class ProposalScreen(QWidget):
    def __init__(self, controller: ViewController, card: Card, parent=None):
        super().__init__(parent)
        self.controller = controller

        heart = PulseHeart()
        question = QLabel(card.text("proposal_question"))
        question.setAlignment(Qt.AlignmentFlag.AlignCenter)
        question.setWordWrap(True)
        question.setStyleSheet(f"font-size:44px; font-weight:700; color:{RED_DARK};")

        self.yes = QPushButton(card.text("yes"))
        self.yes.setCursor(Qt.PointingHandCursor)
        self.yes.clicked.connect(self.on_yes)

        # "no" is free-floating: not in any layout, placed by _place_no
        self.no = DodgeButton(card.text("no"), self)
        self.no.setStyleSheet(NO_CSS)
        self.no.adjustSize()
        self.no.dodged.connect(self.on_no)
        self._no_anim = None

        # the row never pushes its growing button's size onto the window
        self.row = QWidget()
        self.row.setMinimumHeight(180)
        self.row.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Preferred)
        row_lay = QHBoxLayout(self.row)
        row_lay.setSizeConstraint(QLayout.SizeConstraint.SetNoConstraint)
        row_lay.addStretch(1)
        row_lay.addWidget(self.yes, 0, Qt.AlignmentFlag.AlignCenter)
        row_lay.addSpacing(self.no.width() + 32)
        row_lay.addStretch(1)

        lay = QVBoxLayout(self)
        lay.addStretch(1)
        lay.addWidget(heart)
        lay.addWidget(question)
        lay.addWidget(self.row)
        lay.addStretch(1)

        self._style_yes(1.0)
        self._yes_base = Size(self.yes.sizeHint().width(), self.yes.sizeHint().height())
        self.render(controller.state)

    def viewport(self) -> Viewport:
        return Viewport(self.width(), self.height())

    @lore_guard("yes click failure")
    def on_yes(self):
        self.controller.accept()

    @lore_guard("no dodge failure")
    def on_no(self):
        self.controller.dodge(self.viewport(), Size(self.no.width(), self.no.height()))

    def _home_pos(self) -> QPoint:
        """Beside the yes button, where "no" waits before its first dodge."""
        yes_geo = self.yes.geometry()
        top_left = self.row.mapTo(self, yes_geo.topRight())
        x = top_left.x() + 32
        y = top_left.y() + (yes_geo.height() - self.no.height()) // 2
        return QPoint(x, y)

    def _target_pos(self, state: SessionState) -> QPoint:
        # scale > 1 means at least one dodge happened; scale never shrinks
        if state.yes_scale <= 1.0:
            return self._home_pos()
        cx = self.width() / 2 + state.no_offset.x
        cy = self.height() / 2 + state.no_offset.y
        x = int(cx - self.no.width() / 2)
        y = int(cy - self.no.height() / 2)
        # an offset picked before a resize may no longer fit
        x = max(0, min(x, self.width() - self.no.width()))
        y = max(0, min(y, self.height() - self.no.height()))
        return QPoint(x, y)

    def _place_no(self, state: SessionState, animate: bool):
        target = self._target_pos(state)
        if self._no_anim is not None:
            self._no_anim.stop()
        if not animate:
            self.no.move(target)
            return
        anim = QPropertyAnimation(self.no, b"pos", self)
        anim.setDuration(250)
        anim.setEndValue(target)
        anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        anim.start()
        self._no_anim = anim

    def resizeEvent(self, e):  # type: ignore[override]
        super().resizeEvent(e)
        QTimer.singleShot(0, lambda: self.render(self.controller.state, animate=False))

    def showEvent(self, e):  # type: ignore[override]
        super().showEvent(e)
        QTimer.singleShot(0, lambda: self._place_no(self.controller.state, animate=False))

    def _style_yes(self, s: float):
        self.yes.setStyleSheet(f"""
            QPushButton {{
                background:{RED}; color:white; font-weight:700;
                font-size:{int(24 * s)}px; border:0;
                border-radius:{int(30 * s)}px; padding:{int(16 * s)}px {int(48 * s)}px;
            }}
            QPushButton:hover {{ background:{RED_DARK}; }}
        """)
        self.yes.updateGeometry()

    def render(self, state: SessionState, animate: bool = True):
        # the session scale keeps growing; the drawn scale stops at what fits
        self._style_yes(fit_scale(state.yes_scale, self._yes_base, Size(self.width(), self.height())))
        self.no.raise_()
        self._place_no(state, animate=animate and self.isVisible() and state.yes_scale > 1.0)


# -------------------------- Confetti overlay --------------------------
class ConfettiOverlay(QWidget):
    """Transparent layer over the window; deletes itself once every particle is spent."""
    def __init__(self, spec: BurstSpec, parent: QWidget):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self.setGeometry(parent.rect())
        self.particles = launch(spec, self.width(), self.height())
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._timer.start(FRAME_MS)
        self.raise_()
        self.show()

    def _tick(self):
        self.particles = step(self.particles)
        if not self.particles:
            self._timer.stop()
            self.deleteLater()
            return
        self.update()

    def paintEvent(self, e):  # type: ignore[override]
        p = QPainter(self)
        try:
            p.setRenderHint(QPainter.Antialiasing, True)
            p.setPen(Qt.NoPen)
            for pt in self.particles:
                p.save()
                p.setOpacity(pt.opacity)
                p.setBrush(QBrush(QColor(pt.color)))
                p.translate(pt.wobble_x, pt.wobble_y)
                p.rotate(math.degrees(pt.tilt))
                p.scale(1.0, abs(math.sin(pt.tilt)) + 0.2)
                p.drawRect(QRect(-5, -5, 10, 10))
                p.restore()
        finally:
            p.end()


# -------------------------- Gallery screen --------------------------
def placeholder_pixmap(seed: int, size: int = 400) -> QPixmap:
    """Deterministic stand-in tile when even the placeholder cannot be fetched."""
    pm = QPixmap(size, size)
    hue = (seed * 47) % 60 + 320          # pinks through reds
    pm.fill(QColor.fromHsv(hue % 360, 90 + (seed * 13) % 80, 240))
    p = QPainter(pm)
    try:
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setPen(QColor("white"))
        f = QFont()
        f.setPixelSize(size // 3)
        p.setFont(f)
        p.drawText(pm.rect(), Qt.AlignmentFlag.AlignCenter, "❤")
    finally:
        p.end()
    return pm


class PhotoTile(QLabel):
    failed = Signal(int)

    def __init__(self, index: int, alt: str, net: QNetworkAccessManager,
                 seed: int, parent=None):
        super().__init__(parent)
        self.index = index
        self._net = net
        self._seed = seed
        self._pixmap = QPixmap()
        self._source = None
        self.setToolTip(alt)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumSize(160, 160)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setStyleSheet(f"background:{PINK_SOFT}; border:4px solid white; border-radius:16px;")

        self.overlay = QLabel("❤", self)
        self.overlay.setStyleSheet("color:white; font-size:24px; background:transparent;")
        self.overlay.hide()

    def set_source(self, source: str):
        if source == self._source:
            return
        self._source = source
        if "://" in source:
            reply = self._net.get(QNetworkRequest(QUrl(source)))
            reply.finished.connect(lambda r=reply: self._on_reply(r))
            return
        pm = QPixmap(source)
        if pm.isNull():
            self.failed.emit(self.index)
            return
        self._show(pm)

    def _on_reply(self, reply: QNetworkReply):
        pm = QPixmap()
        if reply.error() == QNetworkReply.NetworkError.NoError:
            pm.loadFromData(reply.readAll())
        else:
            dbg(RuntimeError(reply.errorString()), f"placeholder fetch slot {self.index}")
        reply.deleteLater()
        self._show(pm if not pm.isNull() else placeholder_pixmap(self._seed))

    def _show(self, pm: QPixmap):
        self._pixmap = pm
        self._rescale()

    def _rescale(self):
        if self._pixmap.isNull() or self.width() <= 8:
            return
        side = self.width() - 8
        scaled = self._pixmap.scaled(side, side, Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                                     Qt.TransformationMode.SmoothTransformation)
        x = (scaled.width() - side) // 2
        y = (scaled.height() - side) // 2
        self.setPixmap(scaled.copy(x, y, side, side))

    def resizeEvent(self, e):  # type: ignore[override]
        super().resizeEvent(e)
        if self.height() != self.width():
            self.setFixedHeight(self.width())
        self.overlay.move(16, self.height() - 44)
        self._rescale()

    def enterEvent(self, e):  # type: ignore[override]
        super().enterEvent(e)
        self.overlay.show()

    def leaveEvent(self, e):  # type: ignore[override]
        super().leaveEvent(e)
        self.overlay.hide()


class GalleryScreen(QWidget):
    def __init__(self, controller: ViewController, card: Card, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._net = QNetworkAccessManager(self)
        self._columns = 0

        title = QLabel(f"✨ {card.text('gallery_title')} ✨")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet(f"font-size:46px; font-weight:700; color:{PINK_DARK};")
        subtitle = QLabel(card.text("gallery_subtitle"))
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle.setStyleSheet(f"font-style:italic; color:{PINK};")

        self.tiles = []
        for slot in controller.state.slots:
            t = PhotoTile(slot.index, card.text("photo_alt", i=slot.index), self._net,
                          card.placeholder_seed(slot.index))
            t.failed.connect(self.on_failed)
            self.tiles.append(t)

        self.grid_host = QWidget()
        self.grid = QGridLayout(self.grid_host)
        self.grid.setSpacing(24)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        scroll.setStyleSheet("background:transparent;")
        scroll.setWidget(self.grid_host)

        back = QPushButton(card.text("gallery_back"))
        back.setCursor(Qt.PointingHandCursor)
        back.setStyleSheet(LINK_CSS)
        back.clicked.connect(self.on_back)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(24, 24, 24, 24)
        lay.addWidget(title)
        lay.addWidget(subtitle)
        lay.addWidget(scroll, 1)
        lay.addWidget(back, 0, Qt.AlignmentFlag.AlignHCenter)

        self._reflow()

    @lore_guard("gallery back failure")
    def on_back(self):
        self.controller.back()

    @lore_guard("image fallback failure")
    def on_failed(self, index: int):
        if self.controller.image_failed(index):
            log_event("placeholder_used", [f"slot={index}"])

    def _columns_for(self, width: int) -> int:
        if width >= 1024:
            return 4
        if width >= 768:
            return 2
        return 1

    def _reflow(self):
        cols = self._columns_for(self.width())
        if cols == self._columns:
            return
        self._columns = cols
        for t in self.tiles:
            self.grid.removeWidget(t)
        for n, t in enumerate(self.tiles):
            self.grid.addWidget(t, n // cols, n % cols)

    def resizeEvent(self, e):  # type: ignore[override]
        super().resizeEvent(e)
        self._reflow()

    def reveal(self):
        """Staggered fade-in: tile i starts at i × 100 ms."""
        for t in self.tiles:
            _fade_in(t, ms=400, delay=t.index * 100)

    def render(self, state: SessionState):
        for slot, tile in zip(state.slots, self.tiles):
            tile.set_source(slot.source)


# -------------------------- Main Window --------------------------
class _WindowEffects(Effects):
    def __init__(self, window: "Main"):
        self.window = window

    def shake(self):
        self.window.password.shake()

    def burst(self, spec: BurstSpec):
        ConfettiOverlay(spec, self.window.centralWidget())


class Main(QMainWindow):
    def __init__(self, card: Card, *, rng: random.Random | None = None):
        super().__init__()
        self.card = card
        self.setWindowTitle(card.text("window_title"))
        self.setStyleSheet(f"QMainWindow {{ background: qlineargradient(x1:0, y1:0, x2:1, y2:1,"
                           f" stop:0 {PINK_BG}, stop:1 #ffe4ec); }}")
        _app_font = QFont()
        _app_font.setPointSize(13)
        self.setFont(_app_font)

        self.controller = ViewController(card=card, scheduler=QtScheduler(self),
                                         effects=_WindowEffects(self), rng=rng)

        self.password = PasswordScreen(self.controller, card)
        self.proposal = ProposalScreen(self.controller, card)
        self.gallery = GalleryScreen(self.controller, card)
        self.pages = {
            Screen.PASSWORD: self.password,
            Screen.PROPOSAL: self.proposal,
            Screen.GALLERY: self.gallery,
        }
        self.stack = QStackedWidget()
        for page in self.pages.values():
            self.stack.addWidget(page)

        self.cw = QWidget()
        root_layout = QVBoxLayout(self.cw)
        root_layout.setContentsMargins(16, 16, 16, 16)
        root_layout.addWidget(self.stack, 1)
        self.setCentralWidget(self.cw)

        self._screen = self.controller.state.screen
        self.stack.setCurrentWidget(self.pages[self._screen])
        self.controller.subscribe(self.on_state)

        self._normalize_window_sizing()

        # [HG-UX|geometry-load|v1]
        s = QSettings(APP_FRIENDLY_NAME, APP_FRIENDLY_NAME)
        if (geo := s.value("main/geometry", None)) is not None:
            self.restoreGeometry(geo)

    def _normalize_window_sizing(self):
        """1200x800 window, centered, resizable."""
        target_w, target_h = 1200, 800
        self.setMinimumSize(480, 640)
        self.resize(target_w, target_h)
        screen = QGuiApplication.primaryScreen()
        if screen:
            avail = screen.availableGeometry()
            self.move(avail.x() + (avail.width() - target_w) // 2,
                      avail.y() + (avail.height() - target_h) // 2)

    def on_state(self, state: SessionState):
        if state.screen is not self._screen:
            self._on_transition(self._screen, state.screen)
        self.pages[state.screen].render(state)

    def _on_transition(self, old: Screen, new: Screen):
        self._screen = new
        page = self.pages[new]
        self.stack.setCurrentWidget(page)
        if new is Screen.GALLERY:
            page.reveal()
        else:
            _fade_in(page)

        if old is Screen.PASSWORD and new is Screen.PROPOSAL:
            log_event("unlocked")
        elif new is Screen.GALLERY:
            log_event("accepted", [f"yes_scale={self.controller.state.yes_scale:.1f}"])
        elif old is Screen.GALLERY:
            log_event("gallery_back")

    def resizeEvent(self, e):  # type: ignore[override]
        super().resizeEvent(e)
        for overlay in self.cw.findChildren(ConfettiOverlay):
            overlay.setGeometry(self.cw.rect())

    def closeEvent(self, ev):
        # [HG-UX|geometry-save|v1]
        QSettings(APP_FRIENDLY_NAME, APP_FRIENDLY_NAME).setValue("main/geometry", self.saveGeometry())
        self.controller.close()
        log_event("app_closing")
        lorekeeper.end_session()
        super().closeEvent(ev)


# -------------------------- App bootstrap --------------------------
def _rng_from_env() -> random.Random:
    seed = os.environ.get("HEARTGATE_SEED")
    if seed is None or seed == "":
        return random.Random()
    try:
        return random.Random(int(seed))
    except ValueError:
        raise SystemExit(f"HEARTGATE_SEED must be an integer, got {seed!r}")


def main(argv=None) -> int:
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(Qt.HighDpiScaleFactorRoundingPolicy.PassThrough)
    app = QApplication.instance() or QApplication(argv if argv is not None else sys.argv)

    try:
        card = load_card()
    except CardError as e:
        QMessageBox.critical(None, APP_FRIENDLY_NAME, str(e))
        return 1

    sid = lorekeeper.begin_session(notes=f"card v{card.version}")
    log_event("app_started", [f"session={sid}", f"data={lorekeeper.data_dir()}"])

    w = Main(card, rng=_rng_from_env())
    w.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
