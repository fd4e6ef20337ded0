from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, model_validator

from cluster_monitor.models.base import BaseModel
from cluster_monitor.models.cluster import EventRecord, NodeCondition


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    HEALTHY = "Healthy"
    DEGRADED = "Degraded"


class RankingMode(str, Enum):
    """Mode de classement des namespaces les plus consommateurs"""
    # Somme brute coeurs + octets, comportement historique
    COMPAT = "compat"
    # Coeurs + Gio
    NORMALIZED = "normalized"


# === SANTÉ DU CLUSTER ===
class NodeStatus(BaseModel):
    name: str
    status: str
    conditions: List[NodeCondition]
    capacity: Dict[str, str]
    allocatable: Dict[str, str]


class NodeSummary(BaseModel):
    total: int
    healthy: int
    details: List[NodeStatus]


class ComponentStatus(BaseModel):
    name: str
    status: Optional[str] = None
    ready: bool


class ClusterHealth(BaseModel):
    overall: HealthStatus
    nodes: NodeSummary
    components: List[ComponentStatus]
    timestamp: datetime = Field(default_factory=utc_now)


# === UTILISATION DES RESSOURCES ===
class PodSummary(BaseModel):
    name: str
    phase: Optional[str] = None
    containers: int


class NamespaceResourceStats(BaseModel):
    """Accumulateur par namespace, rempli pendant un seul passage d'agrégation"""

    model_config = ConfigDict(frozen=False)

    namespace: str
    pod_count: int = 0
    containers: int = 0
    requested_cpu: float = 0.0
    requested_memory: int = 0
    limit_cpu: float = 0.0
    limit_memory: int = 0
    pods: List[PodSummary] = Field(default_factory=list)


class UtilizationSummary(BaseModel):
    total_namespaces: int
    total_pods: int
    total_containers: int


class ResourceUtilization(BaseModel):
    by_namespace: List[NamespaceResourceStats]
    summary: UtilizationSummary
    timestamp: datetime = Field(default_factory=utc_now)


class TopConsumers(BaseModel):
    top_namespaces: List[NamespaceResourceStats]
    ranking_mode: RankingMode = RankingMode.COMPAT
    timestamp: datetime = Field(default_factory=utc_now)


# === ÉVÉNEMENTS ===
class EventList(BaseModel):
    events: List[EventRecord]
    count: int
    timestamp: datetime = Field(default_factory=utc_now)


class RecentEventList(EventList):
    time_range: str


# === LOGS ===
class LogFetchResult(BaseModel):
    """Logs d'un pod, ou marqueur d'erreur si la récupération a échoué"""

    pod_name: str
    namespace: str
    logs: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _logs_xor_error(self) -> "LogFetchResult":
        if (self.logs is None) == (self.error is None):
            raise ValueError("exactly one of 'logs' or 'error' must be set")
        return self

    @property
    def failed(self) -> bool:
        return self.error is not None


class AggregatedLogs(BaseModel):
    logs: List[LogFetchResult]
    pod_count: int
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorLogSummary(BaseModel):
    pod_name: str
    namespace: str
    error_count: int
    errors: List[str]


class ErrorLogs(BaseModel):
    error_logs: List[ErrorLogSummary]
    pods_with_errors: int
    timestamp: datetime = Field(default_factory=utc_now)


# === DASHBOARD ===
class WarningsDigest(BaseModel):
    count: int
    recent_warnings: List[EventRecord]


class RecentEventsDigest(BaseModel):
    count: int
    events: List[EventRecord]


class Dashboard(BaseModel):
    cluster_health: ClusterHealth
    resource_utilization: UtilizationSummary
    warnings: WarningsDigest
    recent_events: RecentEventsDigest
    timestamp: datetime = Field(default_factory=utc_now)


# === ERREURS ===
class ErrorResponse(BaseModel):
    status_code: int
    timestamp: datetime = Field(default_factory=utc_now)
    path: str
    method: str
    message: str
    details: Optional[Any] = None
