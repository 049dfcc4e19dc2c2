"""Accounting period guard and persisted period configuration."""

import json
from dataclasses import replace
from datetime import date
from typing import Optional

from dateutil.parser import isoparse

from microledger.database.base import Database
from microledger.domain.entities import PeriodCheck, PeriodConfig
from microledger.domain.errors import OutOfPeriodError, PeriodClosedError, ValidationError
from microledger.logging_config import get_logger

logger = get_logger("period")

PERIOD_SETTING_KEY = "accounting_period"


def default_period(today: Optional[date] = None) -> PeriodConfig:
    """Return the current calendar year, unlocked, past allowed, future disallowed."""
    year = (today or date.today()).year
    return PeriodConfig(
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        name=str(year),
    )


class PeriodGuard:
    """Checks posting dates against one accounting period configuration."""

    def __init__(self, config: PeriodConfig):
        self.config = config

    def check_date(self, entry_date: date) -> PeriodCheck:
        """Classify a date against the period.

        A locked period rejects every date. Otherwise dates before the start
        or after the end are rejected unless past/future postings are allowed.
        """
        config = self.config
        if config.is_locked:
            return PeriodCheck.LOCKED
        if entry_date < config.start_date and not config.allow_past_transactions:
            return PeriodCheck.BEFORE_PERIOD_START
        if entry_date > config.end_date and not config.allow_future_transactions:
            return PeriodCheck.AFTER_PERIOD_END
        return PeriodCheck.OK

    def error_for(self, entry_date: date):
        """Return the error matching a failed check, or None when the date is accepted."""
        check = self.check_date(entry_date)
        if check is PeriodCheck.OK:
            return None
        if check is PeriodCheck.LOCKED:
            return PeriodClosedError(entry_date, self.config.name or None)
        return OutOfPeriodError(entry_date, check, self.config.start_date, self.config.end_date)


def period_to_json(config: PeriodConfig) -> str:
    return json.dumps(
        {
            "start_date": config.start_date.isoformat(),
            "end_date": config.end_date.isoformat(),
            "name": config.name,
            "is_locked": config.is_locked,
            "allow_past_transactions": config.allow_past_transactions,
            "allow_future_transactions": config.allow_future_transactions,
        }
    )


def period_from_json(value: str) -> PeriodConfig:
    data = json.loads(value)
    return PeriodConfig(
        start_date=isoparse(data["start_date"]).date(),
        end_date=isoparse(data["end_date"]).date(),
        name=data.get("name", ""),
        is_locked=bool(data.get("is_locked", False)),
        allow_past_transactions=bool(data.get("allow_past_transactions", True)),
        allow_future_transactions=bool(data.get("allow_future_transactions", False)),
    )


class PeriodService:
    """Service for reading and changing the stored accounting period."""

    def __init__(self, db: Database):
        """Initialize period service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_config(self) -> PeriodConfig:
        """Return the stored period, or the current calendar year if none is stored."""
        stored = self.db.get_setting(PERIOD_SETTING_KEY)
        if stored is None:
            return default_period()
        return period_from_json(stored)

    def save_config(self, config: PeriodConfig) -> PeriodConfig:
        if config.end_date < config.start_date:
            raise ValidationError(
                f"Period end {config.end_date} is before its start {config.start_date}"
            )
        self.db.save_setting(PERIOD_SETTING_KEY, period_to_json(config))
        logger.info(
            "Accounting period saved",
            extra={
                "start_date": config.start_date,
                "end_date": config.end_date,
                "is_locked": config.is_locked,
            },
        )
        return config

    def set_period(
        self,
        start_date: date,
        end_date: date,
        name: Optional[str] = None,
        allow_past: Optional[bool] = None,
        allow_future: Optional[bool] = None,
    ) -> PeriodConfig:
        """Replace the period dates, keeping lock state and unspecified flags.

        Raises:
            ValidationError: If end_date is before start_date
        """
        current = self.get_config()
        updated = replace(
            current,
            start_date=start_date,
            end_date=end_date,
            name=name if name is not None else f"{start_date.isoformat()}..{end_date.isoformat()}",
            allow_past_transactions=(
                allow_past if allow_past is not None else current.allow_past_transactions
            ),
            allow_future_transactions=(
                allow_future if allow_future is not None else current.allow_future_transactions
            ),
        )
        return self.save_config(updated)

    def lock_period(self) -> PeriodConfig:
        logger.info("Locking accounting period")
        return self.save_config(replace(self.get_config(), is_locked=True))

    def unlock_period(self) -> PeriodConfig:
        logger.info("Unlocking accounting period")
        return self.save_config(replace(self.get_config(), is_locked=False))

    def guard(self) -> PeriodGuard:
        """Build a guard over the currently stored period."""
        return PeriodGuard(self.get_config())
