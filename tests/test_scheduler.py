from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from repobackup.config import Config, ScheduleSpec
from repobackup.exceptions import ExecutionError
from repobackup.scheduler import Scheduler, is_scheduled_day

# Day 100 of 2026
DAY_100 = datetime(2026, 4, 10, 14, 30, 0, tzinfo=timezone.utc)


class StopLoop(Exception):
    pass


def make_scheduler(times, frequency="daily", at="14:30", run_backup=None):
    config = Config(schedule=ScheduleSpec(frequency=frequency, time=at))
    clock = MagicMock(side_effect=list(times))
    return Scheduler(config, run_backup or MagicMock(), clock=clock, sleep=MagicMock())


def test_fires_once_per_day_at_the_configured_minute():
    scheduler = make_scheduler([DAY_100, DAY_100 + timedelta(seconds=30)])
    scheduler.last_fired_day = DAY_100.toordinal() - 1

    assert scheduler.tick() is True
    scheduler.run_backup.assert_called_once_with(scheduler.config)
    assert scheduler.last_fired_day == DAY_100.toordinal()

    assert scheduler.tick() is False
    assert scheduler.run_backup.call_count == 1


def test_does_not_fire_outside_the_configured_minute():
    scheduler = make_scheduler([DAY_100.replace(minute=29), DAY_100.replace(hour=15)])

    assert scheduler.tick() is False
    assert scheduler.tick() is False
    scheduler.run_backup.assert_not_called()


def test_failed_run_does_not_mark_the_day():
    scheduler = make_scheduler([DAY_100], run_backup=MagicMock(side_effect=ExecutionError(["git", "push"], 3, "denied")))

    assert scheduler.tick() is True
    assert scheduler.last_fired_day is None


def test_unexpected_error_does_not_escape_the_loop():
    scheduler = make_scheduler([DAY_100], run_backup=MagicMock(side_effect=OSError("disk full")))

    assert scheduler.tick() is True
    assert scheduler.last_fired_day is None


def test_fires_again_on_the_next_day():
    scheduler = make_scheduler([DAY_100, DAY_100 + timedelta(days=1)])

    assert scheduler.tick() is True
    assert scheduler.tick() is True
    assert scheduler.run_backup.call_count == 2


def test_missing_schedule_never_fires():
    scheduler = Scheduler(Config(), MagicMock(), clock=lambda: DAY_100, sleep=MagicMock())

    assert scheduler.tick() is False
    scheduler.run_backup.assert_not_called()


def test_weekly_schedule_fires_on_mondays_only():
    monday = datetime(2026, 10, 19, 14, 30, tzinfo=timezone.utc)
    scheduler = make_scheduler([monday + timedelta(days=1), monday], frequency="weekly")

    assert scheduler.tick() is False
    assert scheduler.tick() is True


@pytest.mark.parametrize("frequency, moment, expected", [
    ("daily", datetime(2026, 10, 20), True),
    ("weekly", datetime(2026, 10, 19), True),
    ("weekly", datetime(2026, 10, 20), False),
    ("monthly", datetime(2026, 11, 1), True),
    ("monthly", datetime(2026, 11, 2), False),
])
def test_is_scheduled_day(frequency, moment, expected):
    assert is_scheduled_day(frequency, moment) == expected


def test_loop_sleeps_a_minute_after_firing_and_polls_otherwise():
    scheduler = make_scheduler([DAY_100, DAY_100 + timedelta(seconds=30)])
    scheduler.sleep.side_effect = [None, StopLoop()]

    with pytest.raises(StopLoop):
        scheduler.run_forever()

    assert [c.args[0] for c in scheduler.sleep.call_args_list] == [60, 30]
    assert scheduler.run_backup.call_count == 1


def test_clock_in_reference_zone_drives_firing():
    # 11:30 UTC is 14:30 in Moscow
    instant = datetime(2026, 4, 10, 11, 30, tzinfo=timezone.utc)
    config = Config(schedule=ScheduleSpec(frequency="daily", time="14:30"), timezone="Europe/Moscow")
    scheduler = Scheduler(config, MagicMock(), sleep=MagicMock())

    with patch("repobackup.clock.datetime") as datetime_mock:
        datetime_mock.now.return_value = instant
        assert scheduler.tick() is True

    scheduler.run_backup.assert_called_once_with(config)


def test_unknown_timezone_is_logged_and_skipped():
    config = Config(schedule=ScheduleSpec(frequency="daily", time="14:30"), timezone="Mars/Olympus_Mons")
    scheduler = Scheduler(config, MagicMock(), sleep=MagicMock())

    assert scheduler.tick() is False
    scheduler.run_backup.assert_not_called()
