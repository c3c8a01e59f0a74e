import pytest

from core.services.barcode_scanner import BarcodeScanner, KeyboardHub, KeyStroke


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t

    def advance_ms(self, ms):
        self.t += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scans():
    return []


def _scanner(scans, clock, **kw):
    return BarcodeScanner(scans.append, clock=clock, **kw)


def _type(scanner, clock, text, gap_ms):
    results = []
    for ch in text:
        clock.advance_ms(gap_ms)
        results.append(scanner.handle_key(KeyStroke(key=ch)))
    clock.advance_ms(gap_ms)
    results.append(scanner.handle_key(KeyStroke(key="Enter")))
    return results


def test_fast_burst_is_a_scan(scans, clock):
    sc = _scanner(scans, clock)
    results = _type(sc, clock, "890123", 10)
    assert scans == ["890123"]
    assert results[-1] is True
    assert not any(results[:-1])
    assert sc.state == "idle"


def test_slow_typing_is_not_a_scan(scans, clock):
    sc = _scanner(scans, clock)
    results = _type(sc, clock, "890123", 500)
    assert scans == []
    assert results[-1] is False
    assert sc.buffer == ""


def test_short_buffer_not_emitted(scans, clock):
    sc = _scanner(scans, clock)
    assert _type(sc, clock, "123", 5)[-1] is False
    assert scans == []
    assert _type(sc, clock, "1234", 5)[-1] is True
    assert scans == ["1234"]


def test_gap_restarts_buffer(scans, clock):
    sc = _scanner(scans, clock)
    for ch in "99":
        clock.advance_ms(5)
        sc.handle_key(KeyStroke(key=ch))
    clock.advance_ms(200)
    _type(sc, clock, "ABCDE", 5)
    assert scans == ["ABCDE"]


def test_explicit_timestamps(scans):
    sc = BarcodeScanner(scans.append, clock=lambda: 0.0)
    for i, ch in enumerate("4006381"):
        sc.handle_key(KeyStroke(key=ch, timestamp_ms=i * 8.0))
    assert sc.handle_key(KeyStroke(key="Enter", timestamp_ms=60.0)) is True
    assert scans == ["4006381"]


def test_modified_keys_are_ignored(scans, clock):
    sc = _scanner(scans, clock)
    for ch in "5555":
        clock.advance_ms(5)
        sc.handle_key(KeyStroke(key=ch))
    clock.advance_ms(5)
    assert sc.handle_key(KeyStroke(key="c", ctrl=True)) is False
    assert sc.buffer == "5555"
    assert sc.handle_key(KeyStroke(key="Enter", alt=True)) is False
    assert sc.buffer == "5555"
    assert sc.handle_key(KeyStroke(key="Enter")) is True
    assert scans == ["5555"]


def test_non_printable_keys_do_not_touch_buffer(scans, clock):
    sc = _scanner(scans, clock)
    clock.advance_ms(5)
    sc.handle_key(KeyStroke(key="A"))
    assert sc.handle_key(KeyStroke(key="Shift")) is False
    assert sc.buffer == "A"


def test_modifier_key_does_not_refresh_gap_timer(scans, clock):
    sc = _scanner(scans, clock)
    clock.advance_ms(5)
    sc.handle_key(KeyStroke(key="1"))
    clock.advance_ms(10)
    sc.handle_key(KeyStroke(key="2"))
    clock.advance_ms(40)
    assert sc.handle_key(KeyStroke(key="Shift")) is False
    # 60 ms depuis "2" : la touche Shift n'a pas remis le chrono à zéro
    clock.advance_ms(20)
    sc.handle_key(KeyStroke(key="3"))
    assert sc.buffer == "3"
    clock.advance_ms(5)
    sc.handle_key(KeyStroke(key="4"))
    clock.advance_ms(5)
    assert sc.handle_key(KeyStroke(key="Enter")) is False
    assert scans == []


def test_disabled_scanner_is_inert(scans, clock):
    sc = _scanner(scans, clock, enabled=False)
    assert _type(sc, clock, "890123", 5) == [False] * 7
    assert scans == []


def test_disabling_clears_buffer(scans, clock):
    sc = _scanner(scans, clock)
    clock.advance_ms(5)
    sc.handle_key(KeyStroke(key="1"))
    assert sc.state == "accumulating"
    sc.enabled = False
    assert sc.buffer == ""
    sc.enabled = True
    assert _type(sc, clock, "2345", 5)[-1] is True
    assert scans == ["2345"]


def test_hub_dispatch_and_listening_scope(scans, clock):
    hub = KeyboardHub()
    sc = _scanner(scans, clock)
    with sc.listening(hub):
        assert sc.attached
        assert hub.listener_count == 1
        for ch in "7777":
            clock.advance_ms(5)
            hub.dispatch(KeyStroke(key=ch))
        clock.advance_ms(5)
        assert hub.dispatch(KeyStroke(key="Enter")) is True
    assert not sc.attached
    assert hub.listener_count == 0
    assert scans == ["7777"]


def test_listening_detaches_on_error(scans, clock):
    hub = KeyboardHub()
    sc = _scanner(scans, clock)
    with pytest.raises(RuntimeError):
        with sc.listening(hub):
            raise RuntimeError("boom")
    assert hub.listener_count == 0


def test_two_scanners_are_independent(clock):
    got_a, got_b = [], []
    hub_a, hub_b = KeyboardHub(), KeyboardHub()
    a = BarcodeScanner(got_a.append, clock=clock)
    b = BarcodeScanner(got_b.append, clock=clock)
    a.attach(hub_a)
    b.attach(hub_b)
    for ch in "ABCD":
        clock.advance_ms(5)
        hub_a.dispatch(KeyStroke(key=ch))
    clock.advance_ms(5)
    hub_a.dispatch(KeyStroke(key="Enter"))
    assert got_a == ["ABCD"]
    assert got_b == []
    assert b.buffer == ""


def test_reattach_moves_listener(scans, clock):
    first, second = KeyboardHub(), KeyboardHub()
    sc = _scanner(scans, clock)
    sc.attach(first)
    sc.attach(second)
    assert first.listener_count == 0
    assert second.listener_count == 1
    sc.detach()
    sc.detach()
    assert second.listener_count == 0
