"""ScanSlotHistory: fill scan1..scan3 in order, then overwrite scan3 only."""

from datetime import datetime, timedelta, timezone

from scan_engine.domain.models.machine import ActivityStatus, ScanSlots
from scan_engine.domain.scan_slots import next_slot, record_activity

T0 = datetime(2026, 1, 5, 6, 0, tzinfo=timezone.utc)


def test_four_scans_freeze_first_two_and_overwrite_third():
    scans = ScanSlots()
    written = []
    statuses = [ActivityStatus.RUNNING, ActivityStatus.IDLE, ActivityStatus.RUNNING, ActivityStatus.IDLE]
    for i, status in enumerate(statuses):
        scans, slot = record_activity(scans, status, f"op-{i}", T0 + timedelta(minutes=i))
        written.append(slot)
        if i == 1:
            first_two = (scans.scan1, scans.scan2)

    assert written == ["scan1", "scan2", "scan3", "scan3"]
    assert (scans.scan1, scans.scan2) == first_two
    assert scans.scan1.operator_id == "op-0"
    assert scans.scan2.operator_id == "op-1"
    assert scans.scan3.operator_id == "op-3"
    assert scans.scan3.status == ActivityStatus.IDLE


def test_gap_is_filled_before_later_slots():
    scans, _ = record_activity(ScanSlots(), ActivityStatus.RUNNING, "a", T0)
    scans, _ = record_activity(scans, ActivityStatus.RUNNING, "b", T0)
    scans, _ = record_activity(scans, ActivityStatus.RUNNING, "c", T0)
    gapped = ScanSlots(scan1=scans.scan1, scan3=scans.scan3)
    assert next_slot(gapped) == "scan2"


def test_record_activity_does_not_mutate_input():
    empty = ScanSlots()
    record_activity(empty, ActivityStatus.RUNNING, "a", T0)
    assert empty.scan1 is None


def test_slots_round_trip_through_dict():
    scans, _ = record_activity(ScanSlots(), ActivityStatus.RUNNING, "a", T0)
    data = scans.to_dict()
    assert set(data) == {"scan1"}
    assert ScanSlots.from_dict(data) == scans
    assert ScanSlots.from_dict(None) == ScanSlots()
