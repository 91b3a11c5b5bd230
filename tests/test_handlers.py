import pytest

from conftest import TODAY, make_record
from core.errors import StoreWriteError
from core.session import SessionPhase
from handlers import COMMAND_REGISTRY, dispatch


def test_all_commands_registered():
    assert {
        "set_start",
        "set_end",
        "start_meeting",
        "end_meeting",
        "start_focus",
        "end_focus",
        "status",
        "save_day",
        "history",
        "window_summaries",
        "weekly_summaries",
    } <= set(COMMAND_REGISTRY)


def test_unknown_command(ctx):
    response = dispatch(ctx, "nope")
    assert not response.success
    assert response.error == "nope"


def test_missing_required_payload(ctx):
    response = dispatch(ctx, "set_start", {})
    assert not response.success
    assert response.message == "Invalid input for set_start"


def test_set_start_reports_projected_end(ctx):
    response = dispatch(ctx, "set_start", {"time": "8:30"})

    assert response.success
    assert response.data.start == "08:30"
    assert response.data.projected_end == "16:50"
    assert response.data.phase == SessionPhase.TRACKING.value


def test_malformed_time_keeps_previous_value(ctx):
    dispatch(ctx, "set_start", {"time": "08:30"})
    response = dispatch(ctx, "set_start", {"time": "8h30"})

    assert not response.success
    assert response.error == "FormatError"
    assert response.data.start == "08:30"


def test_end_before_start_is_rejected(ctx):
    dispatch(ctx, "set_start", {"time": "09:00"})
    response = dispatch(ctx, "set_end", {"time": "08:00"})

    assert not response.success
    assert response.error == "InvalidIntervalError"
    assert response.data.end is None


def test_meeting_commands(ctx, clock):
    clock.set("10:00")
    started = dispatch(ctx, "start_meeting", {"name": "Planning"})
    assert started.success
    assert started.data.meeting_running
    assert started.data.meeting_name == "Planning"

    assert not dispatch(ctx, "start_meeting", {"name": "Again"}).success

    clock.set("10:45")
    ended = dispatch(ctx, "end_meeting")
    assert ended.success
    assert ended.data.meetings[0].duration_minutes == 45
    assert not dispatch(ctx, "end_meeting").success


def test_focus_commands_update_cache(ctx, clock):
    clock.set("13:00")
    assert dispatch(ctx, "start_focus").success
    assert ctx.focus_cache.read() == (True, 0)

    clock.set("13:40")
    response = dispatch(ctx, "end_focus")
    assert response.success
    assert response.data.focus_total_minutes == 40
    assert ctx.focus_cache.read() == (False, 0)


def test_meeting_interrupts_focus(ctx, clock):
    dispatch(ctx, "start_focus")
    clock.set("09:30")
    dispatch(ctx, "start_meeting", {"name": ""})

    status = dispatch(ctx, "status").data
    assert status.meeting_name == "Meeting"
    assert not status.focus_running
    assert status.focus_total_minutes == 30
    assert ctx.focus_cache.read() == (False, 0)


def test_save_requires_start_and_end(ctx, store):
    dispatch(ctx, "set_start", {"time": "09:00"})
    response = dispatch(ctx, "save_day")

    assert not response.success
    assert response.error == "SessionNotClosable"
    assert store.read_all() == []


def test_save_day_appends_and_closes(ctx, store, clock):
    dispatch(ctx, "set_start", {"time": "09:00"})
    clock.set("11:00")
    dispatch(ctx, "start_meeting", {"name": "Review"})
    clock.set("11:30")
    dispatch(ctx, "set_end", {"time": "17:00"})

    response = dispatch(ctx, "save_day")

    assert response.success
    (record,) = store.read_all()
    assert record.date == TODAY.isoformat()
    assert record.meetings[0].name == "Review"
    assert record.meetings[0].duration_minutes == 30
    assert ctx.session.phase == SessionPhase.CLOSED
    assert not dispatch(ctx, "save_day").success


def test_failed_save_keeps_session(ctx, monkeypatch):
    dispatch(ctx, "set_start", {"time": "09:00"})
    dispatch(ctx, "set_end", {"time": "17:00"})

    def fail(record):
        raise StoreWriteError("disk full")

    monkeypatch.setattr(ctx.store, "append", fail)
    response = dispatch(ctx, "save_day")

    assert not response.success
    assert "disk full" in response.error
    assert ctx.session.phase == SessionPhase.TRACKING
    assert ctx.session.is_closable()


def test_history_is_sorted(ctx, store):
    for day in ("2024-01-03", "2024-01-01", "2024-01-02"):
        store.append(make_record(day))

    response = dispatch(ctx, "history")
    assert response.success
    assert [r.date for r in response.data] == ["2024-01-01", "2024-01-02", "2024-01-03"]


def test_corrupt_history_degrades_to_empty(ctx, store):
    store.append(make_record("2024-01-01"))
    with open(store.path, "a", encoding="utf-8") as f:
        f.write("{broken\n")

    history = dispatch(ctx, "history")
    assert not history.success
    assert history.data == []
    assert "line 2" in history.message

    window = dispatch(ctx, "window_summaries")
    assert not window.success
    assert len(window.data) == ctx.window_size
    assert all(s.is_blank for s in window.data)

    assert dispatch(ctx, "weekly_summaries").data == []


@pytest.mark.parametrize("window_size, expected", [(None, 5), (3, 3)])
def test_window_summaries_size(ctx, store, window_size, expected):
    store.append(make_record(TODAY.isoformat()))
    payload = {"window_size": window_size} if window_size else None

    response = dispatch(ctx, "window_summaries", payload)

    assert response.success
    assert len(response.data) == expected
    assert response.data[-1].is_today
    assert response.data[-1].worked_minutes == 480


def test_weekly_summaries(ctx, store):
    store.append(make_record("2024-01-08"))
    store.append(make_record("2024-01-01"))

    response = dispatch(ctx, "weekly_summaries")
    assert [w.week for w in response.data] == ["2024-W01", "2024-W02"]


def test_closed_session_rejects_commands(ctx):
    dispatch(ctx, "set_start", {"time": "09:00"})
    dispatch(ctx, "set_end", {"time": "17:00"})
    assert dispatch(ctx, "save_day").success

    for command, payload in [
        ("set_start", {"time": "10:00"}),
        ("start_meeting", {"name": "Late"}),
        ("start_focus", None),
    ]:
        response = dispatch(ctx, command, payload)
        assert not response.success
        assert response.error == "SessionClosed"


def test_unexpected_error_becomes_failed_response(ctx, monkeypatch):
    def broken():
        raise RuntimeError("clock exploded")

    monkeypatch.setattr(ctx, "clock", broken)
    response = dispatch(ctx, "start_focus")

    assert not response.success
    assert response.error == "clock exploded"
    assert response.data is None


def test_undecodable_store_degrades_like_corrupt_json(ctx, store):
    store.append(make_record("2024-01-01"))
    with open(store.path, "ab") as f:
        f.write(b"\xff\xfe bad\n")

    window = dispatch(ctx, "window_summaries")
    assert not window.success
    assert "line 2" in window.message
    assert len(window.data) == ctx.window_size
    assert all(s.is_blank for s in window.data)


def test_failed_save_keeps_running_timers(ctx, clock, monkeypatch):
    dispatch(ctx, "set_start", {"time": "09:00"})
    dispatch(ctx, "set_end", {"time": "17:00"})
    clock.set("10:00")
    dispatch(ctx, "start_focus")
    clock.set("10:30")

    def fail(record):
        raise StoreWriteError("disk full")

    monkeypatch.setattr(ctx.store, "append", fail)
    assert not dispatch(ctx, "save_day").success

    assert ctx.session.is_focus_running
    assert ctx.session.focus_intervals == []
    assert ctx.focus_cache.read()[0] is True


def test_save_day_records_running_meeting(ctx, store, clock):
    dispatch(ctx, "set_start", {"time": "09:00"})
    dispatch(ctx, "set_end", {"time": "17:00"})
    clock.set("16:00")
    dispatch(ctx, "start_meeting", {"name": "Retro"})
    clock.set("16:45")

    assert dispatch(ctx, "save_day").success

    (record,) = store.read_all()
    assert record.meetings[0].name == "Retro"
    assert record.meetings[0].duration_minutes == 45
    assert not ctx.session.is_meeting_running
