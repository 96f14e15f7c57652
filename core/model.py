# core/model.py — session state for one card window
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Screen(str, Enum):
    PASSWORD = "password"
    PROPOSAL = "proposal"
    GALLERY = "gallery"


@dataclass(frozen=True)
class Offset:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass
class GallerySlot:
    index: int
    source: str
    failed: bool = False


@dataclass
class SessionState:
    screen: Screen = Screen.PASSWORD
    password_input: str = ""
    error: bool = False
    no_offset: Offset = field(default_factory=Offset)
    yes_scale: float = 1.0
    slots: List[GallerySlot] = field(default_factory=list)

    def slot(self, index: int) -> GallerySlot:
        for s in self.slots:
            if s.index == index:
                return s
        raise KeyError(f"No gallery slot {index}")
