from fastapi import APIRouter, Depends, Query
from typing import Optional

from cluster_monitor.api.auth import require_monitoring_role
from cluster_monitor.api.schemas.monitoring import (
    AggregatedLogs,
    ClusterHealth,
    Dashboard,
    ErrorLogs,
    EventList,
    RankingMode,
    RecentEventList,
    ResourceUtilization,
    TopConsumers,
)
from cluster_monitor.config import settings
from cluster_monitor.dependencies import (
    get_cluster_health_service,
    get_dashboard_service,
    get_events_service,
    get_pod_logs_service,
    get_resource_utilization_service,
)
from cluster_monitor.services.cluster_health_service import ClusterHealthService
from cluster_monitor.services.dashboard_service import DashboardService
from cluster_monitor.services.events_service import EventsService
from cluster_monitor.services.pod_logs_service import PodLogsService
from cluster_monitor.services.resource_utilization_service import ResourceUtilizationService

router = APIRouter(
    prefix="/monitoring",
    tags=["monitoring"],
    dependencies=[Depends(require_monitoring_role)],
)


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """Vue d'ensemble du monitoring"""
    return await dashboard_service.get_dashboard()


@router.get("/health", response_model=ClusterHealth)
async def get_health(
    cluster_health_service: ClusterHealthService = Depends(get_cluster_health_service),
):
    """État de santé du cluster"""
    return await cluster_health_service.get_cluster_health()


@router.get("/resources", response_model=ResourceUtilization)
async def get_resource_utilization(
    namespace: Optional[str] = None,
    resource_service: ResourceUtilizationService = Depends(get_resource_utilization_service),
):
    """Utilisation des ressources par namespace"""
    return await resource_service.get_resource_utilization(namespace)


@router.get("/resources/top", response_model=TopConsumers)
async def get_top_consumers(
    namespace: Optional[str] = None,
    limit: int = Query(10, ge=1),
    mode: RankingMode = RankingMode.COMPAT,
    resource_service: ResourceUtilizationService = Depends(get_resource_utilization_service),
):
    """Namespaces les plus consommateurs"""
    return await resource_service.get_top_consumers(namespace, limit, mode)


@router.get("/events", response_model=EventList)
async def get_events(
    namespace: Optional[str] = None,
    type: Optional[str] = None,
    events_service: EventsService = Depends(get_events_service),
):
    """Événements du cluster, plus récents d'abord"""
    return await events_service.get_events(namespace, type)


@router.get("/events/warnings", response_model=EventList)
async def get_warnings(
    namespace: Optional[str] = None,
    events_service: EventsService = Depends(get_events_service),
):
    """Événements de type Warning"""
    return await events_service.get_warning_events(namespace)


@router.get("/events/recent", response_model=RecentEventList)
async def get_recent_events(
    namespace: Optional[str] = None,
    hours: float = Query(1, gt=0),
    events_service: EventsService = Depends(get_events_service),
):
    """Événements des dernières heures"""
    return await events_service.get_recent_events(namespace, hours)


@router.get("/logs/{namespace}", response_model=AggregatedLogs, response_model_exclude_none=True)
async def aggregate_logs(
    namespace: str,
    label_selector: Optional[str] = Query(None, alias="labelSelector"),
    tail_lines: int = Query(settings.DEFAULT_TAIL_LINES, alias="tailLines", ge=1),
    pod_logs_service: PodLogsService = Depends(get_pod_logs_service),
):
    """Logs agrégés de tous les pods d'un namespace"""
    return await pod_logs_service.aggregate_logs(namespace, label_selector, tail_lines)


@router.get("/logs/{namespace}/errors", response_model=ErrorLogs)
async def get_error_logs(
    namespace: str,
    tail_lines: int = Query(settings.DEFAULT_TAIL_LINES, alias="tailLines", ge=1),
    pod_logs_service: PodLogsService = Depends(get_pod_logs_service),
):
    """Lignes d'erreur des logs d'un namespace"""
    return await pod_logs_service.get_error_logs(namespace, tail_lines)
