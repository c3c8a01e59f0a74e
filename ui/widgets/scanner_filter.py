from __future__ import annotations
import functools
from typing import Optional

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QApplication, QWidget

from core.services.barcode_scanner import BarcodeScanner, KeyboardHub, KeyListener, KeyStroke


def key_stroke_from_qt(event: QKeyEvent) -> KeyStroke:
    mods = event.modifiers()
    if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
        key = "Enter"
    else:
        text = event.text()
        key = text if len(text) == 1 and text.isprintable() else f"Key_{int(event.key())}"
    return KeyStroke(
        key=key,
        ctrl=bool(mods & Qt.KeyboardModifier.ControlModifier),
        alt=bool(mods & Qt.KeyboardModifier.AltModifier),
        meta=bool(mods & Qt.KeyboardModifier.MetaModifier),
    )


class _FilterState:
    """État du filtre, hors de l'objet Qt : reste lisible après sa destruction."""

    __slots__ = ("hub", "widget", "installed")

    def __init__(self, widget: QWidget):
        self.hub = KeyboardHub()
        self.widget: Optional[QWidget] = widget
        self.installed = False


def _widget_gone(state: _FilterState, *_args) -> None:
    # le filtre, enfant du widget, est déjà détruit : aucun appel Qt ici
    state.widget = None
    state.installed = False


class QtKeySource(QObject):
    """
    Source de touches limitée à un widget (dialogue, onglet).
    Filtre posé sur l'application mais ne traite que les touches reçues par
    le widget ayant le focus à l'intérieur de `widget`. Enfant du widget,
    il disparaît avec lui ; close() le retire plus tôt.
    """

    def __init__(self, widget: QWidget):
        super().__init__(widget)
        self._state = _FilterState(widget)
        widget.destroyed.connect(functools.partial(_widget_gone, self._state))

    # ---- KeySource ----
    def add_key_listener(self, listener: KeyListener) -> None:
        state = self._state
        state.hub.add_key_listener(listener)
        if not state.installed and state.widget is not None:
            app = QApplication.instance()
            if app is not None:
                app.installEventFilter(self)
                state.installed = True

    def remove_key_listener(self, listener: KeyListener) -> None:
        self._state.hub.remove_key_listener(listener)
        if self._state.hub.listener_count == 0:
            self._uninstall()

    def close(self) -> None:
        self._uninstall()
        self._state.widget = None

    @property
    def installed(self) -> bool:
        return self._state.installed

    def _uninstall(self) -> None:
        if self._state.installed:
            app = QApplication.instance()
            if app is not None:
                app.removeEventFilter(self)
            self._state.installed = False

    # ---- Qt ----
    def _owns(self, obj: QObject) -> bool:
        w = self._state.widget
        if w is None or not isinstance(obj, QWidget):
            return False
        # une seule livraison par touche : celle au widget qui a le focus
        focus = QApplication.focusWidget()
        target = focus if focus is not None else w.window()
        if obj is not target:
            return False
        return obj is w or w.isAncestorOf(obj)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if event.type() != QEvent.Type.KeyPress or not self._owns(obj):
            return False
        return self._state.hub.dispatch(key_stroke_from_qt(event))


def attach_scanner(widget: QWidget, scanner: BarcodeScanner) -> QtKeySource:
    """Branche le scanner sur `widget` ; débranché à la destruction du widget."""
    source = QtKeySource(widget)
    scanner.attach(source)
    widget.destroyed.connect(functools.partial(_detach_scanner, scanner))
    return source


def _detach_scanner(scanner: BarcodeScanner, *_args) -> None:
    scanner.detach()
