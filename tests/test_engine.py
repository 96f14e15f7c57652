# tests/test_engine.py
import random

import pytest

from core.model import Offset, Screen, Size, Viewport
from engine import (ERROR_FLASH_MS, NO_BUTTON_MARGIN, YES_MAX_FILL, ManualScheduler,
                    ViewController, dodge_offset, fit_scale)


def _unlock(ctl):
    ctl.set_password("22.02")
    assert ctl.submit_password()


@pytest.mark.parametrize("typed", ["", "22.2", "22.02 ", " 22.02", "2202", "22-02", "02.22"])
def test_wrong_password_flashes_error_and_stays(controller, scheduler, effects, typed):
    controller.set_password(typed)
    assert controller.submit_password() is False
    assert controller.state.screen is Screen.PASSWORD
    assert controller.state.error is True
    assert controller.state.password_input == typed
    assert effects.shakes == 1

    scheduler.advance(ERROR_FLASH_MS - 1)
    assert controller.state.error is True
    scheduler.advance(1)
    assert controller.state.error is False
    assert controller.state.screen is Screen.PASSWORD


def test_secret_unlocks_exactly_once(controller, effects):
    seen = []
    controller.subscribe(lambda s: seen.append(s.screen))
    _unlock(controller)
    assert controller.state.screen is Screen.PROPOSAL
    assert controller.state.error is False
    assert effects.shakes == 0
    assert controller.submit_password() is False
    assert seen == [Screen.PROPOSAL]


def test_overlapping_failed_submits_keep_every_clear(controller, scheduler):
    controller.set_password("nope")
    controller.submit_password()
    scheduler.advance(300)
    controller.submit_password()
    assert scheduler.pending == 2
    # first clear lands at 500 ms even though the second flash started at 300
    scheduler.advance(200)
    assert controller.state.error is False
    scheduler.advance(300)
    assert controller.state.error is False
    assert scheduler.pending == 0


def test_close_cancels_pending_clear(controller, scheduler):
    controller.set_password("nope")
    controller.submit_password()
    controller.close()
    assert scheduler.pending == 0
    scheduler.advance(ERROR_FLASH_MS)
    assert controller.state.error is True


@pytest.mark.parametrize("n", [1, 2, 5, 25])
def test_dodge_grows_yes_and_keeps_no_in_bounds(controller, n):
    _unlock(controller)
    vp = Viewport(800, 600)
    for _ in range(n):
        assert controller.dodge(vp)
        off = controller.state.no_offset
        assert abs(off.x) <= vp.width / 2 - NO_BUTTON_MARGIN
        assert abs(off.y) <= vp.height / 2 - NO_BUTTON_MARGIN
    assert controller.state.yes_scale == pytest.approx(1.0 + 0.2 * n)


def test_dodge_ignored_outside_proposal(controller):
    assert controller.dodge(Viewport(800, 600)) is False
    assert controller.state.yes_scale == 1.0
    assert controller.state.no_offset == Offset(0, 0)


def test_dodge_offset_collapses_on_tiny_viewport():
    off = dodge_offset(Viewport(80, 60), random.Random(3))
    assert off == Offset(0.0, 0.0)


def test_dodge_is_reproducible_with_seed(card):
    a = ViewController(card=card, scheduler=ManualScheduler(), rng=random.Random(7))
    b = ViewController(card=card, scheduler=ManualScheduler(), rng=random.Random(7))
    for ctl in (a, b):
        _unlock(ctl)
        ctl.dodge(Viewport(1200, 800))
        ctl.dodge(Viewport(1200, 800))
    assert a.state.no_offset == b.state.no_offset


def test_yes_bursts_once_and_opens_gallery(controller, effects):
    _unlock(controller)
    assert controller.accept()
    assert controller.state.screen is Screen.GALLERY
    assert len(effects.bursts) == 1
    assert effects.bursts[0].particle_count == 150
    assert controller.accept() is False
    assert len(effects.bursts) == 1


def test_back_keeps_scale_and_offset(controller):
    _unlock(controller)
    controller.dodge(Viewport(1000, 700))
    controller.dodge(Viewport(1000, 700))
    scale, offset = controller.state.yes_scale, controller.state.no_offset
    controller.accept()
    assert controller.back()
    assert controller.state.screen is Screen.PROPOSAL
    assert controller.state.yes_scale == scale
    assert controller.state.no_offset == offset
    assert controller.back() is False


def test_gallery_has_eight_ordered_slots(controller):
    idx = [s.index for s in controller.state.slots]
    assert idx == list(range(1, 9))
    assert controller.state.slots[0].source.endswith("photo1.jpg")
    assert controller.state.slots[7].source.endswith("photo8.jpg")


@pytest.mark.parametrize("i", range(1, 9))
def test_failed_image_uses_placeholder_keyed_by_index(controller, i):
    assert controller.image_failed(i)
    slot = controller.state.slot(i)
    assert slot.failed
    assert slot.source == f"https://picsum.photos/seed/{i + 100}/800/800"
    # a second failure report leaves the placeholder alone
    assert controller.image_failed(i) is False
    assert slot.source == f"https://picsum.photos/seed/{i + 100}/800/800"


def test_unknown_slot_raises(controller):
    with pytest.raises(KeyError):
        controller.image_failed(9)


def test_custom_secret_from_card(card, scheduler):
    card.raw["secret"] = "14.02"
    ctl = ViewController(card=card, scheduler=scheduler)
    ctl.set_password("22.02")
    assert ctl.submit_password() is False
    ctl.set_password("14.02")
    assert ctl.submit_password()


class _EdgeRng(random.Random):
    """Always lands on one end of the range."""
    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.mark.parametrize("value", [0.0, 0.999999])
def test_dodged_button_stays_fully_inside_viewport(card, value):
    ctl = ViewController(card=card, scheduler=ManualScheduler(), rng=_EdgeRng(value))
    _unlock(ctl)
    vp, button = Viewport(1168, 768), Size(109, 44)
    ctl.dodge(vp, button)
    cx = vp.width / 2 + ctl.state.no_offset.x
    cy = vp.height / 2 + ctl.state.no_offset.y
    assert cx - button.width / 2 >= 0
    assert cx + button.width / 2 <= vp.width
    assert cy - button.height / 2 >= 0
    assert cy + button.height / 2 <= vp.height


def test_small_button_keeps_default_margin():
    off = dodge_offset(Viewport(800, 600), _EdgeRng(0.999999), button=Size(40, 20))
    assert off.x == pytest.approx(800 / 2 - NO_BUTTON_MARGIN, abs=1e-3)
    assert off.y == pytest.approx(600 / 2 - NO_BUTTON_MARGIN, abs=1e-3)


def test_wide_button_widens_margin():
    off = dodge_offset(Viewport(800, 600), _EdgeRng(0.999999), button=Size(300, 44))
    assert off.x + 150 <= 400


def test_error_clears_drop_their_handles(controller, scheduler):
    controller.set_password("nope")
    for _ in range(20):
        controller.submit_password()
    assert controller.pending_tasks == 20
    scheduler.advance(ERROR_FLASH_MS)
    assert controller.pending_tasks == 0
    assert controller.state.error is False


def test_fit_scale_caps_drawn_size_but_not_session(controller):
    _unlock(controller)
    for _ in range(30):
        controller.dodge(Viewport(1168, 768))
    assert controller.state.yes_scale == pytest.approx(7.0)

    base, area = Size(220, 70), Size(1168, 768)
    drawn = fit_scale(controller.state.yes_scale, base, area)
    assert base.width * drawn <= area.width * YES_MAX_FILL + 1e-9
    assert base.height * drawn <= area.height * YES_MAX_FILL + 1e-9
    assert fit_scale(1.4, base, area) == pytest.approx(1.4)
    assert fit_scale(3.0, base, Size(10, 10)) == 1.0
