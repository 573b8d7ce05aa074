import time

from repobackup.clock import reference_now
from repobackup.exceptions import BackupError, ConfigError
from repobackup.globals import Globals
from repobackup.log import logger


def is_scheduled_day(frequency: str, moment) -> bool:
    """Daily runs every day, weekly on Mondays, monthly on the 1st."""
    if frequency == "weekly":
        return moment.weekday() == 0
    if frequency == "monthly":
        return moment.day == 1
    return True


class Scheduler:
    """
    Polls the reference clock and fires the backup at the configured time.

    The backup runs synchronously inside the loop, at most once per calendar
    day. A failed run is logged and does not mark the day as done, but since
    the time match is exact to the minute it is in practice not retried
    before the next scheduled day.

    Attributes:
        config (Config): Configuration holding the schedule.
        run_backup (callable): Called with the config; raises on failure.
        clock (callable): Returns the current aware datetime in the reference timezone.
        sleep (callable): Suspends the loop for a number of seconds.
        last_fired_day (int | None): Ordinal of the last day with a successful
            run, None if there was none yet.
    """

    def __init__(self, config, run_backup, clock=None, sleep=time.sleep):
        self.config = config
        self.run_backup = run_backup
        self.clock = clock or (lambda: reference_now(config.timezone))
        self.sleep = sleep
        self.last_fired_day = None

    def is_due(self, now) -> bool:
        schedule = self.config.schedule
        if schedule is None or not schedule.time:
            logger.warning("Backup time is not configured")
            return False

        try:
            target = schedule.time_of_day()
        except ConfigError as e:
            logger.warning(str(e))
            return False

        return (
            now.hour == target.hour
            and now.minute == target.minute
            and now.toordinal() != self.last_fired_day
            and is_scheduled_day(schedule.frequency, now)
        )

    def tick(self) -> bool:
        """
        Run one polling step.

        Returns:
            bool: True if the backup was attempted, whatever its outcome.
        """
        try:
            now = self.clock()
        except ConfigError as e:
            logger.error(f"Cannot read the reference clock: {e}")
            return False

        if not self.is_due(now):
            return False

        logger.info(f"Scheduled backup time reached: {now.strftime('%Y-%m-%d %H:%M:%S %Z')}")
        try:
            self.run_backup(self.config)
        except BackupError as e:
            logger.error(f"Scheduled backup failed: {e}")
        except Exception:
            logger.exception("Scheduled backup failed with an unexpected error")
        else:
            self.last_fired_day = now.toordinal()
            logger.info("Scheduled backup finished successfully")
        return True

    def run_forever(self):
        schedule = self.config.schedule
        logger.info(
            f"Daemon started with schedule {schedule.frequency if schedule else 'none'} "
            f"at {schedule.time if schedule else 'none'} ({self.config.timezone})"
        )
        while True:
            fired = self.tick()
            # Sleeping a full minute after a run keeps the same minute from matching twice
            self.sleep(Globals.SLEEP_AFTER_RUN if fired else Globals.POLL_INTERVAL)
