# core/confetti.py — one-shot particle burst: settings + launch + per-tick physics
#
# Units are pixels and ticks (one tick ≈ one 16 ms frame). The overlay in
# app.py owns the timer; everything here is deterministic for a given rng.

import math
import random
from dataclasses import dataclass, field
from typing import List, Tuple

PARTICLE_COUNT = 150
SPREAD_DEG = 70.0
ANGLE_DEG = 90.0
ORIGIN = (0.5, 0.6)
COLORS = ("#ff0000", "#ff69b4", "#ff1493")

START_VELOCITY = 45.0
DECAY = 0.9
GRAVITY = 1.0
TOTAL_TICKS = 200


@dataclass(frozen=True)
class BurstSpec:
    particle_count: int = PARTICLE_COUNT
    spread: float = SPREAD_DEG
    angle: float = ANGLE_DEG
    origin: Tuple[float, float] = ORIGIN
    colors: Tuple[str, ...] = COLORS
    start_velocity: float = START_VELOCITY
    decay: float = DECAY
    gravity: float = GRAVITY
    ticks: int = TOTAL_TICKS


@dataclass
class Particle:
    x: float
    y: float
    angle: float
    velocity: float
    color: str
    tilt: float
    wobble: float
    wobble_speed: float
    decay: float
    gravity: float
    total_ticks: int
    tick: int = 0
    wobble_x: float = field(init=False)
    wobble_y: float = field(init=False)

    def __post_init__(self):
        self.wobble_x = self.x
        self.wobble_y = self.y

    @property
    def alive(self) -> bool:
        return self.tick < self.total_ticks

    @property
    def opacity(self) -> float:
        return max(0.0, 1.0 - self.tick / float(self.total_ticks))


def launch(spec: BurstSpec, width: float, height: float,
           rng: random.Random | None = None) -> List[Particle]:
    """
    Build spec.particle_count particles at spec.origin (fractions of the
    canvas). Angle 90° points straight up; each particle gets a heading
    within ±spread/2 and a velocity in [0.5, 1.5) × start_velocity.
    """
    rng = rng or random.Random()
    ox, oy = spec.origin[0] * width, spec.origin[1] * height
    rad_angle = math.radians(spec.angle)
    rad_spread = math.radians(spec.spread)

    out: List[Particle] = []
    for n in range(spec.particle_count):
        heading = -rad_angle + (0.5 * rad_spread - rng.random() * rad_spread)
        out.append(Particle(
            x=ox, y=oy,
            angle=heading,
            velocity=spec.start_velocity * 0.5 + rng.random() * spec.start_velocity,
            color=spec.colors[n % len(spec.colors)],
            tilt=(rng.random() * 0.5 + 0.25) * math.pi,
            wobble=rng.random() * 10,
            wobble_speed=min(0.11, rng.random() * 0.1 + 0.05),
            decay=spec.decay,
            gravity=spec.gravity,
            total_ticks=spec.ticks,
        ))
    return out


def step(particles: List[Particle]) -> List[Particle]:
    """Advance every particle one tick; returns the ones still alive."""
    alive = []
    for p in particles:
        p.x += math.cos(p.angle) * p.velocity
        p.y += math.sin(p.angle) * p.velocity + p.gravity * 3
        p.velocity *= p.decay
        p.wobble += p.wobble_speed
        p.wobble_x = p.x + 10 * math.cos(p.wobble)
        p.wobble_y = p.y + 10 * math.sin(p.wobble)
        p.tilt += 0.1
        p.tick += 1
        if p.alive:
            alive.append(p)
    return alive
