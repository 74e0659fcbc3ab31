import datetime as dt

import pytest

from domain.models import ProjectState, TimeKind, TimeSegment, WorkRecord

T0 = dt.datetime(2024, 3, 4, 9, 0, tzinfo=dt.timezone.utc)


def at(minutes):
    return T0 + dt.timedelta(minutes=minutes)


def sample_record():
    return WorkRecord(
        id="r1",
        name="Eng",
        start=at(0),
        end=None,
        state=ProjectState.WORKING,
        segments=[
            TimeSegment(at(0), at(30), TimeKind.PRODUCTIVE),
            TimeSegment(at(30), at(90), TimeKind.PAUSE),
            TimeSegment(at(90), None, TimeKind.PRODUCTIVE),
        ],
    )


def test_duration_counts_productive_segments_only():
    record = sample_record()
    assert record.calculate_duration(now=at(100)) == dt.timedelta(minutes=40)


def test_open_segment_counts_up_to_now():
    record = sample_record()
    assert record.calculate_duration(now=at(150)) == dt.timedelta(minutes=90)


def test_dict_round_trip_keeps_timestamps():
    record = sample_record()
    data = record.to_dict()
    assert data["start"] == "2024-03-04T09:00:00Z"
    assert data["segments"][1]["kind"] == "Pause"
    assert data["segments"][2]["end"] is None
    assert data["state"] == "Working"

    back = WorkRecord.from_dict(data)
    assert back == record


def test_from_dict_rejects_record_without_segments():
    data = sample_record().to_dict()
    data["segments"] = []
    with pytest.raises(ValueError):
        WorkRecord.from_dict(data)


def test_str_shows_state_and_time_spent():
    record = sample_record()
    record.segments[-1].end = at(120)
    record.end = at(120)
    record.state = ProjectState.DONE
    text = str(record)
    assert text.startswith("✓ Eng: ")
    assert text.endswith("(time spent: 01:00:00)")


@pytest.mark.parametrize("data", [None, "r1", ["r1"]])
def test_from_dict_rejects_non_objects(data):
    with pytest.raises(ValueError):
        WorkRecord.from_dict(data)


def test_from_dict_rejects_wrong_field_types():
    good = sample_record().to_dict()

    with pytest.raises(ValueError):
        WorkRecord.from_dict(dict(good, start=5))
    with pytest.raises(ValueError):
        WorkRecord.from_dict(dict(good, segments={}))
    with pytest.raises(ValueError):
        WorkRecord.from_dict(dict(good, segments=[None]))
