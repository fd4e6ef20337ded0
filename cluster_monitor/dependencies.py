import logging
from functools import lru_cache

from fastapi import Depends

from cluster_monitor.config import settings
from cluster_monitor.external.k8s_client import K8sClient
from cluster_monitor.services.cluster_health_service import ClusterHealthService
from cluster_monitor.services.dashboard_service import DashboardService
from cluster_monitor.services.events_service import EventsService
from cluster_monitor.services.pod_logs_service import PodLogsService
from cluster_monitor.services.resource_utilization_service import ResourceUtilizationService


# === CLIENTS EXTERNES ===
@lru_cache()
def get_k8s_client() -> K8sClient:
    return K8sClient(
        request_timeout=settings.K8S_REQUEST_TIMEOUT,
        kubeconfig_path=settings.KUBECONFIG_PATH,
        context=settings.KUBE_CONTEXT,
    )


# === SERVICES ===
# Un service par requête: aucun état partagé entre deux appels d'agrégation
def get_cluster_health_service(k8s_client: K8sClient = Depends(get_k8s_client)) -> ClusterHealthService:
    """Factory pour le service de santé du cluster"""
    return ClusterHealthService(
        k8s_client,
        logger=logging.getLogger("cluster_monitor.services.cluster_health"),
        system_namespace=settings.SYSTEM_NAMESPACE,
    )


def get_resource_utilization_service(
        k8s_client: K8sClient = Depends(get_k8s_client)
) -> ResourceUtilizationService:
    """Factory pour le service d'utilisation des ressources"""
    return ResourceUtilizationService(
        k8s_client,
        logger=logging.getLogger("cluster_monitor.services.resource_utilization"),
    )


def get_events_service(k8s_client: K8sClient = Depends(get_k8s_client)) -> EventsService:
    """Factory pour le service des événements"""
    return EventsService(k8s_client, logger=logging.getLogger("cluster_monitor.services.events"))


def get_pod_logs_service(k8s_client: K8sClient = Depends(get_k8s_client)) -> PodLogsService:
    """Factory pour le service d'agrégation des logs"""
    return PodLogsService(k8s_client, logger=logging.getLogger("cluster_monitor.services.pod_logs"))


def get_dashboard_service(
        cluster_health_service: ClusterHealthService = Depends(get_cluster_health_service),
        resource_utilization_service: ResourceUtilizationService = Depends(get_resource_utilization_service),
        events_service: EventsService = Depends(get_events_service),
) -> DashboardService:
    """Factory pour le service du dashboard"""
    return DashboardService(
        cluster_health_service,
        resource_utilization_service,
        events_service,
        logger=logging.getLogger("cluster_monitor.services.dashboard"),
        warnings_limit=settings.DASHBOARD_WARNINGS_LIMIT,
        recent_events_limit=settings.DASHBOARD_RECENT_EVENTS_LIMIT,
        recent_events_hours=settings.DASHBOARD_RECENT_EVENTS_HOURS,
    )
