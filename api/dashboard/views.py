# api/dashboard/views.py
"""
Dashboard and aggregate statistics endpoints.

Everything here is computed from the sync cache; no endpoint touches the
remote store.
"""
from fastapi import APIRouter, Query

from core.deps import AdminPrincipal, Workspace
from sync.view_models import ActivityEntry, EnrichedAsset
from .models import (
    AssetCounters,
    AssignmentCounters,
    CategoryStat,
    DashboardOverview,
    UpcomingTask,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/overview",
    response_model=DashboardOverview,
    summary="Get high-level overview statistics",
)
async def get_overview_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
) -> DashboardOverview:
    return DashboardOverview(
        stats=AssetCounters(**workspace.get_stats()),
        status_totals=workspace.get_status_totals(),
        utilization_rate=workspace.get_utilization_rate(),
        maintenance_rate=workspace.get_maintenance_rate(),
        average_age_years=round(workspace.get_average_asset_age(), 2),
        assignments=AssignmentCounters(**workspace.get_assignment_stats()),
    )


@router.get(
    "/categories",
    response_model=list[CategoryStat],
    summary="Asset count and value per category",
)
async def get_categories_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
) -> list[CategoryStat]:
    return [CategoryStat(**item) for item in workspace.get_category_stats()]


@router.get(
    "/warranty",
    response_model=list[EnrichedAsset],
    summary="Warranties expiring soon",
)
async def get_warranty_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
    window_days: int | None = Query(None, ge=0, le=3650),
) -> list[EnrichedAsset]:
    return workspace.get_upcoming_warranty_expiries(window_days)


@router.get(
    "/maintenance",
    response_model=list[EnrichedAsset],
    summary="Assets with overdue maintenance",
)
async def get_maintenance_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
) -> list[EnrichedAsset]:
    return workspace.get_overdue_maintenance_assets()


@router.get(
    "/activity",
    response_model=list[ActivityEntry],
    summary="Most recent activity",
)
async def get_activity_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
    limit: int | None = Query(None, ge=1, le=100),
) -> list[ActivityEntry]:
    return workspace.get_recent_activity(limit)


@router.get(
    "/tasks",
    response_model=list[UpcomingTask],
    summary="Derived to-do list for admins",
)
async def get_tasks_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
) -> list[UpcomingTask]:
    return [UpcomingTask(**task) for task in workspace.get_upcoming_tasks()]
