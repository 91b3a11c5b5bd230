import json

import pytest

from conftest import make_record
from core.errors import CorruptRecordError, StoreWriteError
from core.store import RecordStore
from core.timeparse import parse


def test_missing_file_reads_empty(store):
    assert not store.exists()
    assert store.read_all() == []


def test_append_creates_directories(store):
    store.append(make_record("2024-01-02"))
    assert store.exists()
    assert store.path.parent.is_dir()


def test_append_then_read_round_trip(store):
    record = make_record(
        "2024-01-02",
        "08:30",
        "17:00",
        meetings=[("Standup", "09:00", "09:15", 15)],
        focus=[("10:00", "11:30", 90)],
    )
    store.append(record)

    assert store.read_all() == [record]


def test_records_keep_append_order(store):
    days = ["2024-01-03", "2024-01-01", "2024-01-02"]
    for day in days:
        store.append(make_record(day))

    assert [r.date for r in store.read_all()] == days


def test_persisted_line_format(store):
    store.append(make_record("2024-01-02", meetings=[("Sync", "13:00", "13:30", 30)]))

    lines = store.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    obj = json.loads(lines[0])
    assert obj == {
        "date": "2024-01-02",
        "starttime": "09:00",
        "endtime": "17:00",
        "meetings": [
            {
                "meeting_name": "Sync",
                "meeting_start_time": "13:00",
                "meeting_end_time": "13:30",
                "time_in_meeting": 30,
            }
        ],
        "focus_time": [],
    }


def test_record_without_focus_time_loads(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(
        '{"date":"2023-12-01","starttime":"08:00","endtime":"16:00","meetings":[]}\n',
        encoding="utf-8",
    )

    (record,) = store.read_all()
    assert record.focus_intervals == []
    assert record.start == parse("08:00")


def test_unknown_fields_are_ignored(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(
        '{"date":"2023-12-01","starttime":"08:00","endtime":"16:00","notes":"x"}\n',
        encoding="utf-8",
    )

    assert store.read_all()[0].date == "2023-12-01"


def test_blank_lines_are_skipped(store):
    first = make_record("2024-01-01")
    second = make_record("2024-01-02")
    store.path.parent.mkdir(parents=True)
    store.path.write_text(
        f"{first.to_json_line()}\n\n   \n{second.to_json_line()}\n", encoding="utf-8"
    )

    assert store.read_all() == [first, second]


@pytest.mark.parametrize(
    "bad_line",
    [
        "{not json",
        "[1, 2, 3]",
        '{"date":"2024-01-03","starttime":"25:00","endtime":"17:00"}',
        '{"date":"2024-01-03","starttime":"09:00"}',
        '{"date":"03/01/2024","starttime":"09:00","endtime":"17:00"}',
        '{"date":"2024-1-5","starttime":"09:00","endtime":"17:00"}',
    ],
)
def test_corrupt_line_reports_line_number(store, bad_line):
    good = make_record("2024-01-01").to_json_line()
    store.path.parent.mkdir(parents=True)
    store.path.write_text(f"{good}\n{good}\n{bad_line}\n", encoding="utf-8")

    with pytest.raises(CorruptRecordError) as excinfo:
        store.read_all()
    assert excinfo.value.line_number == 3


def test_read_is_idempotent(store):
    store.append(make_record("2024-01-01"))
    store.append(make_record("2024-01-02"))

    assert store.read_all() == store.read_all()


def test_append_failure_raises_store_write_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    store = RecordStore(blocker / "worktime.jsonl")

    with pytest.raises(StoreWriteError):
        store.append(make_record("2024-01-01"))


def test_invalid_utf8_line_reports_line_number(store):
    good = make_record("2024-01-01").to_json_line().encode("utf-8")
    store.path.parent.mkdir(parents=True)
    store.path.write_bytes(good + b"\n\xff\xfe bad\n")

    with pytest.raises(CorruptRecordError) as excinfo:
        store.read_all()
    assert excinfo.value.line_number == 2


def test_unpadded_date_is_rejected():
    with pytest.raises(ValueError):
        make_record("2024-1-5")
