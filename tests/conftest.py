# tests/conftest.py — shared fixtures (headless: no Qt needed)
import copy
import random

import pytest

from core.card import DEFAULTS, Card
from engine import Effects, ManualScheduler, ViewController


class RecordingEffects(Effects):
    def __init__(self):
        self.shakes = 0
        self.bursts = []

    def shake(self):
        self.shakes += 1

    def burst(self, spec):
        self.bursts.append(spec)


@pytest.fixture
def card():
    return Card(copy.deepcopy(DEFAULTS))


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def effects():
    return RecordingEffects()


@pytest.fixture
def controller(card, scheduler, effects):
    return ViewController(card=card, scheduler=scheduler, effects=effects, rng=random.Random(1234))


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("HEARTGATE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HEARTGATE_DEBUG", raising=False)
    return tmp_path
