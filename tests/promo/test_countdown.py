"""Tests for the promo countdown."""
from egzamin8.promo.countdown import Countdown


def test_parse_and_format():
    assert str(Countdown.parse("02:37:45")) == "02:37:45"


def test_tick_seconds():
    assert str(Countdown.parse("02:37:45").tick()) == "02:37:44"


def test_tick_borrows_minutes_and_hours():
    assert str(Countdown.parse("02:38:00").tick()) == "02:37:59"
    assert str(Countdown.parse("01:00:00").tick()) == "00:59:59"


def test_tick_wraps_to_full_day():
    assert str(Countdown.parse("00:00:00").tick()) == "23:59:59"
