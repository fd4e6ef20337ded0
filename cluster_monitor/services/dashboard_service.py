import asyncio
import logging
from typing import Optional

from cluster_monitor.api.schemas.monitoring import Dashboard, RecentEventsDigest, WarningsDigest
from cluster_monitor.services.cluster_health_service import ClusterHealthService
from cluster_monitor.services.events_service import EventsService
from cluster_monitor.services.resource_utilization_service import ResourceUtilizationService


class DashboardService:
    """Vue d'ensemble: santé, ressources, avertissements et événements récents"""

    def __init__(
        self,
        cluster_health_service: ClusterHealthService,
        resource_utilization_service: ResourceUtilizationService,
        events_service: EventsService,
        logger: Optional[logging.Logger] = None,
        warnings_limit: int = 5,
        recent_events_limit: int = 10,
        recent_events_hours: float = 1,
    ):
        self.cluster_health_service = cluster_health_service
        self.resource_utilization_service = resource_utilization_service
        self.events_service = events_service
        self.logger = logger or logging.getLogger(__name__)
        self.warnings_limit = warnings_limit
        self.recent_events_limit = recent_events_limit
        self.recent_events_hours = recent_events_hours

    async def get_dashboard(self) -> Dashboard:
        """Lance les quatre récupérations en parallèle; la première erreur fatale est propagée"""
        try:
            health, utilization, warnings, recent = await asyncio.gather(
                self.cluster_health_service.get_cluster_health(),
                self.resource_utilization_service.get_resource_utilization(),
                self.events_service.get_warning_events(),
                self.events_service.get_recent_events(None, self.recent_events_hours),
            )
        except Exception as e:
            self.logger.error(f"Erreur lors de la génération du dashboard: {e}")
            raise

        return Dashboard(
            cluster_health=health,
            resource_utilization=utilization.summary,
            warnings=WarningsDigest(
                count=warnings.count,
                recent_warnings=warnings.events[:self.warnings_limit],
            ),
            recent_events=RecentEventsDigest(
                count=recent.count,
                events=recent.events[:self.recent_events_limit],
            ),
        )
