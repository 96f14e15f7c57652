# core/card.py — card loader (secret, copy, image paths) + helpers

import copy, json, os
from dataclasses import dataclass
from typing import Any, Dict

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CARD_PATH = os.path.join(APP_DIR, "config", "card.json")

DEFAULTS: Dict[str, Any] = {
    "version": "1.0.0",
    "secret": "22.02",
    "texts": {
        "window_title": "Nasza Tajemnica",
        "password_title": "Nasza Tajemnica",
        "password_hint": "Wpisz datę, która wszystko zmieniła...",
        "password_placeholder": "DD.MM",
        "password_submit": "Otwórz Serce",
        "proposal_question": "Czy zgadzasz się być dalej ze mną?",
        "yes": "TAK! ❤️",
        "no": "Nie...",
        "gallery_title": "Nasze Wspomnienia",
        "gallery_subtitle": "Każda chwila z Tobą jest wyjątkowa...",
        "gallery_back": "Wróć do pytania",
        "photo_alt": "Wspomnienie {i}",
    },
    "gallery": {
        "count": 8,
        "photo_pattern": "images/photo{i}.jpg",
        "placeholder_pattern": "https://picsum.photos/seed/{seed}/800/800",
        "placeholder_offset": 100,
    },
}

# ---------- simple in-process cache ----------
_CARD_CACHE = None
_CARD_KEY = None


class CardError(ValueError):
    """Raised when a card file exists but cannot be used."""


def card_path() -> str:
    return os.environ.get("HEARTGATE_CARD") or DEFAULT_CARD_PATH


@dataclass
class Card:
    raw: Dict[str, Any]
    base_dir: str = APP_DIR

    @property
    def version(self) -> str:
        return str(self.raw.get("version", "0.0.0"))

    @property
    def secret(self) -> str:
        return self.raw.get("secret", DEFAULTS["secret"])

    def text(self, key: str, **fmt) -> str:
        texts = self.raw.get("texts", {})
        s = texts.get(key, DEFAULTS["texts"].get(key))
        if s is None:
            raise KeyError(f"Unknown text '{key}' in card")
        return s.format(**fmt) if fmt else s

    def _gallery(self, key: str):
        return self.raw.get("gallery", {}).get(key, DEFAULTS["gallery"][key])

    @property
    def photo_count(self) -> int:
        return int(self._gallery("count"))

    def photo_source(self, index: int) -> str:
        """Relative paths resolve against the card file's folder."""
        src = self._gallery("photo_pattern").format(i=index)
        if "://" in src or os.path.isabs(src):
            return src
        return os.path.normpath(os.path.join(self.base_dir, src))

    def placeholder_seed(self, index: int) -> int:
        return index + int(self._gallery("placeholder_offset"))

    def placeholder_source(self, index: int) -> str:
        return self._gallery("placeholder_pattern").format(seed=self.placeholder_seed(index), i=index)


def _validate(raw: Any, path: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise CardError(f"Card at {path} must be a JSON object")
    if "secret" in raw and not isinstance(raw["secret"], str):
        raise CardError(f"Card at {path}: 'secret' must be a string")
    for section in ("texts", "gallery"):
        if section in raw and not isinstance(raw[section], dict):
            raise CardError(f"Card at {path}: '{section}' must be an object")
    gal = raw.get("gallery", {})
    if "count" in gal and (not isinstance(gal["count"], int) or gal["count"] < 1):
        raise CardError(f"Card at {path}: 'gallery.count' must be a positive integer")
    return raw


def _read_card_from_disk(path: str) -> Card:
    if not os.path.exists(path):
        return Card(copy.deepcopy(DEFAULTS))
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CardError(f"Unreadable card at {path}: {e}") from e
    return Card(_validate(data, path), base_dir=os.path.dirname(os.path.abspath(path)))


def load_card() -> Card:
    global _CARD_CACHE, _CARD_KEY
    path = card_path()
    try:
        mtime = os.path.getmtime(path)
    except OSError:
        mtime = None

    if _CARD_CACHE is None or _CARD_KEY != (path, mtime):
        _CARD_CACHE = _read_card_from_disk(path)
        _CARD_KEY = (path, mtime)
    return _CARD_CACHE


def reload_card() -> Card:
    """
    Force cache invalidation + re-read from disk.
    """
    global _CARD_CACHE, _CARD_KEY
    _CARD_CACHE = None
    _CARD_KEY = None
    return load_card()
