import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from cluster_monitor.api.schemas.monitoring import EventList, RecentEventList, utc_now
from cluster_monitor.external.k8s_client import K8sClient
from cluster_monitor.models.cluster import EventRecord

WARNING = "Warning"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _recency_key(event: EventRecord) -> Tuple[bool, datetime]:
    # Les événements sans horodatage sont placés en dernier
    if event.last_timestamp is None:
        return False, _OLDEST
    return True, _as_utc(event.last_timestamp)


def sort_by_recency(events: List[EventRecord]) -> List[EventRecord]:
    """Tri stable par last_timestamp décroissant"""
    return sorted(events, key=_recency_key, reverse=True)


class EventsService:
    """Filtre, trie et fenêtre les événements du cluster"""

    def __init__(
        self,
        k8s_client: K8sClient,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.k8s_client = k8s_client
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    async def get_events(self, namespace: Optional[str] = None, type: Optional[str] = None) -> EventList:
        """Événements du namespace (ou du cluster), filtrés par type, plus récents d'abord"""
        try:
            events = await self.k8s_client.list_events(namespace)
        except Exception as e:
            self.logger.error(f"Erreur lors de la récupération des événements: {e}")
            raise

        if type:
            events = [event for event in events if event.type == type]

        events = sort_by_recency(events)
        return EventList(events=events, count=len(events))

    async def get_warning_events(self, namespace: Optional[str] = None) -> EventList:
        return await self.get_events(namespace, WARNING)

    async def get_recent_events(self, namespace: Optional[str] = None, hours: float = 1) -> RecentEventList:
        """Événements dont le dernier horodatage est strictement postérieur à now - hours"""
        all_events = await self.get_events(namespace)
        cutoff = _as_utc(self.clock()) - timedelta(hours=hours)

        recent = [
            event for event in all_events.events
            if event.last_timestamp is not None and _as_utc(event.last_timestamp) > cutoff
        ]

        return RecentEventList(
            events=recent,
            count=len(recent),
            time_range=f"Last {hours:g} hour(s)",
        )
