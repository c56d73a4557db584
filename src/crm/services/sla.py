"""SLA deadline calculator.

Pure functions, no I/O. Deadlines are recomputed from the wall clock every
time a process is read and are never persisted.

Stored timestamps are naive UTC (see ``models.base.utc_now``); calendar-day
comparisons happen in the configured SLA time zone.
"""

from datetime import UTC, datetime, tzinfo

from src.crm.models import ProcessPhase, SlaStatus


def compute_deadline(phase: ProcessPhase | None, entered_at: datetime) -> datetime | None:
    """Absolute deadline for a process that entered ``phase`` at ``entered_at``."""
    if phase is None:
        return None
    return entered_at + phase.sla_duration


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def compute_status(deadline: datetime | None, now: datetime, tz: tzinfo = UTC) -> SlaStatus:
    """Three-valued SLA status of ``deadline`` as seen at ``now``.

    OVERDUE once ``now`` passes the deadline; DUE_TODAY when the deadline is
    still ahead but falls on ``now``'s local calendar day; ON_TRACK otherwise,
    including when there is no deadline at all.
    """
    if deadline is None:
        return SlaStatus.ON_TRACK

    deadline_utc = _as_utc(deadline)
    now_utc = _as_utc(now)

    if now_utc > deadline_utc:
        return SlaStatus.OVERDUE
    if deadline_utc.astimezone(tz).date() == now_utc.astimezone(tz).date():
        return SlaStatus.DUE_TODAY
    return SlaStatus.ON_TRACK


def evaluate(
    phase: ProcessPhase | None,
    entered_at: datetime,
    now: datetime,
    tz: tzinfo = UTC,
) -> tuple[datetime | None, SlaStatus]:
    """Deadline and status in one call, as used by listings."""
    deadline = compute_deadline(phase, entered_at)
    return deadline, compute_status(deadline, now, tz)
