"""Retention policy: decide which snapshots to keep and which to delete."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Hashable, Iterable, Iterator

from .manifest import STATUS_COMPLETED, Manifest
from .settings import Settings


@dataclass
class Plan:
    """Snapshots to keep and to delete, newest first."""

    keep: list[Manifest] = field(default_factory=list)
    delete: list[Manifest] = field(default_factory=list)


def _months_ago(now: datetime, months: int) -> datetime:
    total = now.year * 12 + (now.month - 1) - months
    year, month_index = divmod(total, 12)
    first = now.replace(year=year, month=month_index + 1, day=1)
    return first + timedelta(days=now.day - 1)


def _first_per_period(
    manifests: Iterable[Manifest],
    cutoff: datetime,
    period: Callable[[datetime], Hashable],
) -> Iterator[Manifest]:
    seen: set = set()
    for manifest in manifests:
        if manifest.started_at < cutoff:
            continue
        key = period(manifest.started_at)
        if key not in seen:
            seen.add(key)
            yield manifest


def _iso_week(moment: datetime) -> tuple[int, int]:
    year, week, _ = moment.isocalendar()
    return year, week


def compute(settings: Settings, manifests: Iterable[Manifest]) -> Plan:
    """Apply the daily, weekly and monthly retention policy."""
    ordered = sorted(manifests, key=lambda m: m.started_at, reverse=True)
    if not ordered:
        return Plan()

    policy = settings.retention
    now = datetime.now(timezone.utc)

    daily_cutoff = now - timedelta(days=policy.daily)
    keep_ids = {m.id for m in ordered if m.started_at > daily_cutoff}

    if policy.weekly > 0:
        weekly_cutoff = now - timedelta(days=policy.weekly * 7)
        keep_ids.update(m.id for m in _first_per_period(ordered, weekly_cutoff, _iso_week))

    if policy.monthly > 0:
        monthly_cutoff = _months_ago(now, policy.monthly)
        keep_ids.update(
            m.id for m in _first_per_period(ordered, monthly_cutoff, lambda t: (t.year, t.month))
        )

    plan = Plan()
    for manifest in ordered:
        if manifest.status != STATUS_COMPLETED:
            keep_ids.add(manifest.id)
        (plan.keep if manifest.id in keep_ids else plan.delete).append(manifest)
    return plan