"""Time attribution for closed processes.

Replays a process's event log to split its lifetime ``[start_at, closed_at]``
into contiguous segments, each owned by the party recorded on the event that
opened it, and sums the time per owner.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

from src.crm.models import OwnerKind

_ZERO = timedelta(0)
_MILLISECOND = timedelta(milliseconds=1)


class OwnedMoment(Protocol):
    """Anything with an event timestamp and the owner valid from then on."""

    at: datetime
    owner: str


@dataclass(frozen=True)
class DurationBreakdown:
    """Duration split into whole days, hours and minutes."""

    days: int
    hours: int
    minutes: int
    total_minutes: int

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "DurationBreakdown":
        ms = max(0, delta // _MILLISECOND)
        total_minutes = ms // 60_000
        days, remainder = divmod(total_minutes, 1440)
        hours, minutes = divmod(remainder, 60)
        return cls(days=days, hours=hours, minutes=minutes, total_minutes=total_minutes)


@dataclass(frozen=True)
class OwnerSegment:
    owner: str
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return max(_ZERO, self.end - self.start)


@dataclass
class AttributionReport:
    total: timedelta
    by_owner: dict[str, timedelta] = field(default_factory=dict)
    segments: list[OwnerSegment] = field(default_factory=list)

    def owner_total(self, owner: OwnerKind | str) -> timedelta:
        key = owner.value if isinstance(owner, OwnerKind) else owner
        return self.by_owner.get(key, _ZERO)


@dataclass(frozen=True)
class _SyntheticMoment:
    at: datetime
    owner: str


def build_segments(
    events: Sequence[OwnedMoment],
    start_at: datetime,
    closed_at: datetime,
    fallback_owner: str,
) -> list[OwnerSegment]:
    """Partition ``[start_at, closed_at]`` by owner.

    ``events`` must already be ordered by ``at`` ascending. The first segment
    always starts at ``start_at`` so the partition has no leading gap; with no
    events at all a single segment owned by ``fallback_owner`` covers the
    whole lifetime.
    """
    moments: Sequence[OwnedMoment] = events or [_SyntheticMoment(start_at, fallback_owner)]
    segments = []
    for i, moment in enumerate(moments):
        seg_start = start_at if i == 0 else moment.at
        seg_end = moments[i + 1].at if i + 1 < len(moments) else closed_at
        segments.append(OwnerSegment(owner=moment.owner, start=seg_start, end=seg_end))
    return segments


def attribute_time(
    events: Sequence[OwnedMoment],
    start_at: datetime,
    closed_at: datetime,
    fallback_owner: str,
) -> AttributionReport:
    """Sum time spent under each owner over a closed process's lifetime.

    The three known owners are always present in ``by_owner``; unknown owner
    strings found in the log are accumulated under their own key.
    """
    segments = build_segments(events, start_at, closed_at, fallback_owner)
    by_owner: dict[str, timedelta] = {owner.value: _ZERO for owner in OwnerKind}
    for segment in segments:
        by_owner[segment.owner] = by_owner.get(segment.owner, _ZERO) + segment.duration

    return AttributionReport(
        total=max(_ZERO, closed_at - start_at),
        by_owner=by_owner,
        segments=segments,
    )
