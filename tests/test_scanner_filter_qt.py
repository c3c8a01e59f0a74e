import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QCoreApplication, QEvent, Qt  # noqa: E402
from PySide6.QtGui import QKeyEvent  # noqa: E402

from core.services.barcode_scanner import BarcodeScanner  # noqa: E402
from ui.widgets.scanner_filter import attach_scanner, key_stroke_from_qt  # noqa: E402


@pytest.fixture(scope="module")
def app():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


def _key(key, text="", mods=Qt.KeyboardModifier.NoModifier):
    return QKeyEvent(QEvent.Type.KeyPress, key, mods, text)


def test_key_stroke_conversion(app):
    assert key_stroke_from_qt(_key(Qt.Key.Key_A, "a")).key == "a"
    assert key_stroke_from_qt(_key(Qt.Key.Key_Return, "\r")).is_enter
    ks = key_stroke_from_qt(_key(Qt.Key.Key_C, "c", Qt.KeyboardModifier.ControlModifier))
    assert ks.ctrl and not ks.is_printable
    assert not key_stroke_from_qt(_key(Qt.Key.Key_Shift)).is_printable


def test_scan_reaches_focused_widget_only(app):
    win = QtWidgets.QWidget()
    edit = QtWidgets.QLineEdit(win)
    other = QtWidgets.QLineEdit()
    got = []
    scanner = BarcodeScanner(got.append)
    source = attach_scanner(win, scanner)
    assert source.installed

    win.show()
    edit.setFocus()
    app.processEvents()
    # sans fenêtre active (offscreen) le filtre retombe sur la fenêtre
    target = QtWidgets.QApplication.focusWidget() or win
    for ch in "890123":
        assert source.eventFilter(target, _key(Qt.Key.Key_unknown, ch)) is False
    assert source.eventFilter(target, _key(Qt.Key.Key_Return, "\r")) is True
    assert got == ["890123"]
    assert source.eventFilter(other, _key(Qt.Key.Key_A, "a")) is False

    scanner.detach()
    assert not source.installed
    win.close()


def test_deleted_widget_takes_filter_down(app):
    win = QtWidgets.QWidget()
    scanner = BarcodeScanner(lambda code: None)
    source = attach_scanner(win, scanner)
    assert source.parent() is win
    assert source.installed

    win.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)

    assert source.installed is False
    assert not scanner.attached
    # les touches suivantes ne passent plus par le filtre détruit
    field = QtWidgets.QLineEdit()
    QCoreApplication.sendEvent(field, _key(Qt.Key.Key_A, "a"))
    scanner.detach()
    field.deleteLater()


def test_detached_then_dropped_widget(app):
    scanner = BarcodeScanner(lambda code: None)
    win = QtWidgets.QWidget()
    source = attach_scanner(win, scanner)
    scanner.detach()
    assert not source.installed
    del win
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    assert not scanner.attached
    assert source.installed is False
