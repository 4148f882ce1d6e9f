import pytest

from trip_agent.timewindow import DEFAULT_BUDGET_MIN, normalize_time_window, parse_time_window


@pytest.mark.parametrize("window,expected", [
    ("09:00-18:00", 540),
    ("9am to 9pm", 720),
    ("9 AM until 5 PM", 480),
    ("09:00-00:00", 900),
    ("9am to midnight", 900),
    ("12am to 6am", 360),
])
def test_budget_from_window(window, expected):
    assert parse_time_window(window) == expected


@pytest.mark.parametrize("window", ["", None, "whenever", "morning-evening", "18:00-09:00"])
def test_unreadable_window_uses_default(window):
    assert parse_time_window(window) == DEFAULT_BUDGET_MIN


@pytest.mark.parametrize("text,expected", [
    ("9am to midnight", "09:00-00:00"),
    ("9 am to 6 pm", "09:00-18:00"),
    ("from 10:30 am until 8 pm", "10:30-20:00"),
    ("9 to 6", "09:00-18:00"),
    ("2 to 6pm", "14:00-18:00"),
    ("09:00-18:00", "09:00-18:00"),
    ("noon to 10pm", "12:00-22:00"),
])
def test_normalize_free_text(text, expected):
    assert normalize_time_window(text) == expected


@pytest.mark.parametrize("text", [
    "",
    "3 days in Goa",
    "a 10-12 days trip",
    "sometime in the evening",
    "change day 2 to 4 stops",
    "Trip to Goa for 3 days with 2-3 friends",
])
def test_normalize_ignores_non_windows(text):
    assert normalize_time_window(text, strict=True) is None


@pytest.mark.parametrize("text,expected", [
    ("9 to 6", None),
    ("from 9 to 6", "09:00-18:00"),
    ("9 to 6pm", "09:00-18:00"),
    ("add 2 more stops, and go 10:00 to 17:00", "10:00-17:00"),
    ("day 2 to 4 stops, 9am to 5pm", "09:00-17:00"),
])
def test_strict_normalize_needs_clock_marker(text, expected):
    assert normalize_time_window(text, strict=True) == expected
