# tests/test_confetti.py
import math
import random

from core.confetti import COLORS, BurstSpec, launch, step


def test_default_burst_matches_card_look():
    spec = BurstSpec()
    assert spec.particle_count == 150
    assert spec.spread == 70
    assert spec.origin == (0.5, 0.6)
    assert spec.colors == ("#ff0000", "#ff69b4", "#ff1493")


def test_launch_places_particles_at_origin():
    ps = launch(BurstSpec(), 1000, 500, random.Random(0))
    assert len(ps) == 150
    assert all(p.x == 500 and p.y == 300 for p in ps)
    assert {p.color for p in ps} == set(COLORS)


def test_headings_and_velocities_stay_in_range():
    spec = BurstSpec()
    for p in launch(spec, 800, 600, random.Random(42)):
        deg = math.degrees(p.angle)
        assert -90 - 35 <= deg <= -90 + 35
        assert 22.5 <= p.velocity < 67.5


def test_first_tick_moves_everything_up():
    ps = launch(BurstSpec(), 800, 600, random.Random(5))
    ps = step(ps)
    assert all(p.y < 360 for p in ps)


def test_burst_burns_out_after_its_ticks():
    ps = launch(BurstSpec(particle_count=10, ticks=20), 400, 400, random.Random(1))
    for _ in range(19):
        ps = step(ps)
    assert len(ps) == 10
    assert 0 < ps[0].opacity < 1
    assert step(ps) == []


def test_same_seed_same_burst():
    a = launch(BurstSpec(), 640, 480, random.Random(9))
    b = launch(BurstSpec(), 640, 480, random.Random(9))
    assert [(p.angle, p.velocity) for p in a] == [(p.angle, p.velocity) for p in b]
