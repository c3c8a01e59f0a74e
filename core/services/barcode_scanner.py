"""
Distinction douchette / frappe clavier.

Une douchette code-barres se comporte comme un clavier qui tape très vite
puis envoie Entrée. On accumule les caractères tant que l'écart entre deux
touches reste sous `gap_ms` ; sur Entrée, un tampon assez long est émis en
un seul scan et l'Entrée est avalée (pas de validation de formulaire).
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_GAP_MS = 50.0
DEFAULT_MIN_LENGTH = 3

ScanCallback = Callable[[str], None]
KeyListener = Callable[["KeyStroke"], bool]


class KeyStroke(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False
    timestamp_ms: Optional[float] = None

    @property
    def modified(self) -> bool:
        return self.ctrl or self.alt or self.meta

    @property
    def is_printable(self) -> bool:
        return len(self.key) == 1 and not self.modified

    @property
    def is_enter(self) -> bool:
        return self.key == "Enter" and not self.modified


class KeySource(Protocol):
    """Surface qui diffuse les touches (widget Qt, faux clavier de test...)."""

    def add_key_listener(self, listener: KeyListener) -> None: ...

    def remove_key_listener(self, listener: KeyListener) -> None: ...


class BarcodeScanner:
    def __init__(
        self,
        on_scan: ScanCallback,
        *,
        enabled: bool = True,
        gap_ms: float = DEFAULT_GAP_MS,
        min_length: int = DEFAULT_MIN_LENGTH,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.on_scan = on_scan
        self.gap_ms = float(gap_ms)
        self.min_length = int(min_length)
        self._clock = clock
        self._enabled = bool(enabled)
        self._buffer: List[str] = []
        self._last_key_ms = self._now_ms()
        self._source: Optional[KeySource] = None

    # ---------------- état ---------------- #

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)
        if not self._enabled:
            self._buffer = []

    @property
    def buffer(self) -> str:
        return "".join(self._buffer)

    @property
    def state(self) -> Literal["idle", "accumulating"]:
        return "accumulating" if self._buffer else "idle"

    def reset(self) -> None:
        self._buffer = []

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    # ---------------- événements ---------------- #

    def handle_key(self, stroke: KeyStroke) -> bool:
        """Traite une touche. Renvoie True si l'action par défaut doit être supprimée."""
        if not self._enabled:
            return False

        if stroke.is_enter:
            barcode = "".join(self._buffer)
            self._buffer = []
            if len(barcode) > self.min_length:
                logger.info("Barcode scanned: %s", barcode)
                self.on_scan(barcode)
                return True
            return False

        if not stroke.is_printable:
            return False

        now = stroke.timestamp_ms if stroke.timestamp_ms is not None else self._now_ms()
        if now - self._last_key_ms > self.gap_ms:
            # trop lent pour une douchette : frappe manuelle, on repart de zéro
            self._buffer = []
        self._buffer.append(stroke.key)
        self._last_key_ms = now
        return False

    # ---------------- écoute ---------------- #

    def attach(self, source: KeySource) -> None:
        if self._source is source:
            return
        self.detach()
        source.add_key_listener(self.handle_key)
        self._source = source

    def detach(self) -> None:
        if self._source is None:
            return
        try:
            self._source.remove_key_listener(self.handle_key)
        finally:
            self._source = None
            self._buffer = []

    @property
    def attached(self) -> bool:
        return self._source is not None

    @contextmanager
    def listening(self, source: KeySource) -> Iterator["BarcodeScanner"]:
        self.attach(source)
        try:
            yield self
        finally:
            self.detach()


class KeyboardHub:
    """KeySource minimal en mémoire : diffuse chaque touche aux écouteurs."""

    def __init__(self) -> None:
        self._listeners: List[KeyListener] = []

    def add_key_listener(self, listener: KeyListener) -> None:
        self._listeners.append(listener)

    def remove_key_listener(self, listener: KeyListener) -> None:
        self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, stroke: KeyStroke) -> bool:
        suppressed = False
        for listener in list(self._listeners):
            suppressed = listener(stroke) or suppressed
        return suppressed
