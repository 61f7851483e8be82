"""
Registration schedule.

``evaluate_schedule`` decides the open/closed state from the manual flag and
the optional daily window. ``ScheduleService`` is the only accessor of the
persisted settings row and writes automatic transitions back with a
compare-and-swap on ``version``.

Once the window auto-closes registration it stays closed through the next
window until an admin opens it again by hand.
"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.config import settings
from registrar.core.metrics import track_schedule_transition
from registrar.database import utcnow
from registrar.exceptions import ValidationError
from registrar.models.website_settings import WebsiteSettings, WEBSITE_SETTINGS_KEY
from registrar.schemas.settings import ScheduleStatus, WebsiteSettingsUpdate
from registrar.utils.normalization import parse_hhmm, seconds_since_midnight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleState:
    """The fields of the settings row the evaluator reads."""
    is_open: bool = False
    auto_closed: bool = False
    auto_schedule: bool = False
    open_time: str = ""
    close_time: str = ""


# Returned when no settings row exists yet
DEFAULT_SCHEDULE = ScheduleState()


@dataclass(frozen=True)
class ScheduleDecision:
    is_open: bool
    auto_closed: bool
    changed: bool

    @property
    def transition(self) -> Optional[str]:
        if not self.changed:
            return None
        return "auto_open" if self.is_open else "auto_close"


def evaluate_schedule(now: Union[datetime, time, int], schedule) -> ScheduleDecision:
    """
    Evaluate the schedule at ``now`` (a datetime, time or seconds since midnight).

    Cases, first match wins:
    1. closing time reached and marked open: close, flag as auto-closed
    2. inside the window, marked closed, not auto-closed: open
    3. inside the window and marked open: stay open
    4. otherwise: closed
    """
    is_open = bool(schedule.is_open)
    auto_closed = bool(schedule.auto_closed)
    unchanged = ScheduleDecision(is_open=is_open, auto_closed=auto_closed, changed=False)

    if not schedule.auto_schedule or not schedule.open_time or not schedule.close_time:
        return unchanged

    open_seconds = parse_hhmm(schedule.open_time)
    close_seconds = parse_hhmm(schedule.close_time)
    if open_seconds is None or close_seconds is None:
        logger.warning(
            f"Ignoring unparseable schedule window {schedule.open_time!r}-{schedule.close_time!r}"
        )
        return unchanged

    current = seconds_since_midnight(now)
    if open_seconds <= close_seconds:
        should_be_open = open_seconds <= current < close_seconds
        # Before the opening time is neither: reported closed, nothing persisted
        should_be_closed = current >= close_seconds
    else:
        # Overnight window, e.g. 18:00-06:00
        should_be_open = current >= open_seconds or current < close_seconds
        should_be_closed = close_seconds <= current < open_seconds

    if should_be_closed and is_open:
        return ScheduleDecision(is_open=False, auto_closed=True, changed=True)
    if should_be_open and not is_open and not auto_closed:
        return ScheduleDecision(is_open=True, auto_closed=False, changed=True)
    if should_be_open and is_open:
        return unchanged
    return ScheduleDecision(is_open=False, auto_closed=auto_closed, changed=False)


def _status(row: Optional[WebsiteSettings], decision: ScheduleDecision) -> ScheduleStatus:
    if row is None:
        return ScheduleStatus(is_open=decision.is_open)
    return ScheduleStatus(
        is_open=decision.is_open,
        message=row.message or "",
        open_time=row.open_time or "",
        close_time=row.close_time or "",
        auto_schedule=row.auto_schedule,
        codes_active=row.codes_active,
        post_registration_message=row.post_registration_message or "",
    )


class ScheduleService:
    """Accessor for the single website settings row."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def now() -> datetime:
        return datetime.now(ZoneInfo(settings.SCHEDULE_TIMEZONE))

    async def get_settings(self) -> Optional[WebsiteSettings]:
        result = await self.db.execute(
            select(WebsiteSettings)
            .where(WebsiteSettings.key == WEBSITE_SETTINGS_KEY)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def codes_active(self) -> bool:
        row = await self.get_settings()
        return True if row is None else row.codes_active

    async def current_status(self, now: Optional[datetime] = None) -> ScheduleStatus:
        """
        Current schedule as seen by callers.

        May persist an automatic transition, in which case the session is
        committed. A lost compare-and-swap re-reads and re-evaluates.
        """
        if now is None:
            now = self.now()

        for attempt in range(settings.SCHEDULE_CAS_RETRIES + 1):
            row = await self.get_settings()
            if row is None:
                return _status(None, evaluate_schedule(now, DEFAULT_SCHEDULE))

            decision = evaluate_schedule(now, row)
            if not decision.changed:
                return _status(row, decision)

            result = await self.db.execute(
                update(WebsiteSettings)
                .where(
                    WebsiteSettings.key == WEBSITE_SETTINGS_KEY,
                    WebsiteSettings.version == row.version,
                )
                .values(
                    is_open=decision.is_open,
                    auto_closed=decision.auto_closed,
                    version=WebsiteSettings.version + 1,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                await self.db.commit()
                track_schedule_transition(decision.transition)
                logger.info(f"Schedule {decision.transition} at {now}")
                return _status(row, decision)

            await self.db.rollback()
            logger.info(f"Schedule transition lost a race (attempt {attempt + 1}), re-reading")

        # Give up persisting but still answer with the evaluated state
        logger.warning("Schedule transition not persisted after retries")
        row = await self.get_settings()
        return _status(row, evaluate_schedule(now, row or DEFAULT_SCHEDULE))

    async def set_schedule(
        self,
        data: WebsiteSettingsUpdate,
        updated_by: Optional[str] = None,
    ) -> WebsiteSettings:
        """Manual write. Always clears ``auto_closed`` and bumps ``version``."""
        for field_name in ("open_time", "close_time"):
            value = getattr(data, field_name)
            if value and parse_hhmm(value) is None:
                raise ValidationError(
                    "Time must be in HH:MM format",
                    errors=[{"field": field_name, "message": "Time must be in HH:MM format"}],
                )

        values = data.model_dump()
        row = await self.get_settings()
        if row is None:
            row = WebsiteSettings(
                key=WEBSITE_SETTINGS_KEY,
                auto_closed=False,
                version=1,
                updated_by=updated_by,
                **values,
            )
            self.db.add(row)
            try:
                await self.db.commit()
            except IntegrityError:
                # Another writer created the row first
                await self.db.rollback()
                row = await self.get_settings()
            else:
                logger.info(f"Website settings created by {updated_by}")
                return row

        for field_name, value in values.items():
            setattr(row, field_name, value)
        row.auto_closed = False
        row.version = row.version + 1
        row.updated_by = updated_by
        await self.db.commit()
        logger.info(f"Website settings updated by {updated_by}: is_open={row.is_open}")
        return row
