# sync/stats.py
"""
Aggregate statistics over the in-memory asset collection.

Pure functions: same input, same output, input never mutated. Anything
time-dependent takes `today` so callers (and tests) control the clock.
Empty collections give zeros, never a division error.
"""
from collections import Counter
from collections.abc import Sequence
from datetime import date, timedelta

from db_models.enums import AssetStatus, AssignmentStatus, RequestStatus
from .view_models import ActivityEntry, AssetRequestView, AssignmentView, EnrichedAsset

DAYS_PER_YEAR = 365.25


def _ratio(part: int, total: int) -> float:
    return part / total if total > 0 else 0.0


def _today(today: date | None) -> date:
    return today or date.today()


def totals_by_status(assets: Sequence[EnrichedAsset]) -> dict[str, int]:
    """Count per status; every known status is present, unknown ones are added."""
    totals = {status.value: 0 for status in AssetStatus}
    for asset in assets:
        totals[asset.status] = totals.get(asset.status, 0) + 1
    return totals


def totals_by_category(assets: Sequence[EnrichedAsset]) -> list[dict]:
    """
    Count and summed value per category, largest first.

    Returns:
        [{"name": category, "count": n, "value": total}, ...]
    """
    counts: Counter[str] = Counter()
    values: dict[str, float] = {}
    for asset in assets:
        counts[asset.category] += 1
        values[asset.category] = values.get(asset.category, 0.0) + asset.value
    return [
        {"name": name, "count": counts[name], "value": round(values[name], 2)}
        for name in sorted(counts, key=lambda n: (-counts[n], n))
    ]


def utilization_rate(assets: Sequence[EnrichedAsset]) -> float:
    """Share of assets currently assigned to someone, in [0, 1]."""
    assigned = sum(1 for asset in assets if asset.is_assigned)
    return _ratio(assigned, len(assets))


def maintenance_rate(assets: Sequence[EnrichedAsset]) -> float:
    """Share of assets in maintenance, in [0, 1]."""
    in_repair = sum(1 for asset in assets if asset.status == AssetStatus.MAINTENANCE.value)
    return _ratio(in_repair, len(assets))


def average_age_years(assets: Sequence[EnrichedAsset], today: date | None = None) -> float:
    """Mean age of assets with a known purchase date; the rest are excluded."""
    today = _today(today)
    ages = [
        (today - asset.purchase_date).days / DAYS_PER_YEAR
        for asset in assets
        if asset.purchase_date is not None
    ]
    if not ages:
        return 0.0
    return sum(ages) / len(ages)


def upcoming_warranty_expirations(
    assets: Sequence[EnrichedAsset],
    window_days: int = 30,
    today: date | None = None,
) -> list[EnrichedAsset]:
    """Assets whose warranty ends within [today, today + window_days], soonest first."""
    today = _today(today)
    horizon = today + timedelta(days=window_days)
    expiring = [
        asset
        for asset in assets
        if asset.warranty_expiry is not None and today <= asset.warranty_expiry <= horizon
    ]
    return sorted(expiring, key=lambda asset: (asset.warranty_expiry, asset.serial_number))


def overdue_maintenance(assets: Sequence[EnrichedAsset], today: date | None = None) -> list[EnrichedAsset]:
    """
    Assets in maintenance whose scheduled date has passed.

    Without a tracked `maintenance_due` date an asset in maintenance counts
    as overdue.
    """
    today = _today(today)
    return [
        asset
        for asset in assets
        if asset.status == AssetStatus.MAINTENANCE.value
        and (asset.maintenance_due is None or asset.maintenance_due < today)
    ]


def asset_stats(assets: Sequence[EnrichedAsset]) -> dict:
    """Headline counters for the overview cards."""
    return {
        "total": len(assets),
        "available": sum(
            1 for a in assets if a.status == AssetStatus.ACTIVE.value and not a.is_assigned
        ),
        "assigned": sum(1 for a in assets if a.is_assigned),
        "in_repair": sum(1 for a in assets if a.status == AssetStatus.MAINTENANCE.value),
        "retired": sum(1 for a in assets if a.status == AssetStatus.RETIRED.value),
        "total_value": round(sum(a.value for a in assets), 2),
    }


def assignment_stats(assignments: Sequence[AssignmentView]) -> dict:
    counts = Counter(a.status for a in assignments)
    return {
        "active": counts.get(AssignmentStatus.ACTIVE.value, 0),
        "pending": counts.get(AssignmentStatus.PENDING.value, 0),
        "returned": counts.get(AssignmentStatus.RETURNED.value, 0),
    }


def recent_activity(entries: Sequence[ActivityEntry], limit: int = 10) -> list[ActivityEntry]:
    """Newest entries first, capped to `limit`."""
    ordered = sorted(
        entries,
        key=lambda e: e.timestamp.timestamp() if e.timestamp else float("-inf"),
        reverse=True,
    )
    return ordered[:max(limit, 0)]


def upcoming_tasks(
    assets: Sequence[EnrichedAsset],
    requests: Sequence[AssetRequestView],
    window_days: int = 30,
    today: date | None = None,
) -> list[dict]:
    """Admin to-do list derived from the current collections (at most six)."""
    tasks: list[dict] = []

    expiring = upcoming_warranty_expirations(assets, window_days, today)
    if expiring:
        tasks.append({
            "task": "Warranty Renewals Due",
            "due": f"{len(expiring)} assets expiring soon",
            "priority": "high",
            "count": len(expiring),
        })

    overdue = overdue_maintenance(assets, today)
    if overdue:
        tasks.append({
            "task": "Maintenance Required",
            "due": f"{len(overdue)} assets need attention",
            "priority": "high",
            "count": len(overdue),
        })

    pending = [r for r in requests if r.status == RequestStatus.PENDING.value]
    if pending:
        tasks.append({
            "task": "Pending Assignment Requests",
            "due": f"{len(pending)} requests awaiting approval",
            "priority": "medium",
            "count": len(pending),
        })

    return tasks[:6]
