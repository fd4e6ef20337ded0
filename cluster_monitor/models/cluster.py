from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from cluster_monitor.models.base import BaseModel


class NodeCondition(BaseModel):
    type: str
    status: str
    reason: Optional[str] = None


class NodeSnapshot(BaseModel):
    """Vue figée d'un noeud au moment du listing"""

    name: str
    conditions: List[NodeCondition] = Field(default_factory=list)
    capacity: Dict[str, str] = Field(default_factory=dict)
    allocatable: Dict[str, str] = Field(default_factory=dict)

    @property
    def ready(self) -> bool:
        """Prêt si la condition Ready a le statut "True" (condition absente => non prêt)"""
        for condition in self.conditions:
            if condition.type == "Ready":
                return condition.status == "True"
        return False


class ContainerSnapshot(BaseModel):
    name: str
    requests: Dict[str, str] = Field(default_factory=dict)
    limits: Dict[str, str] = Field(default_factory=dict)


class PodSnapshot(BaseModel):
    name: str
    namespace: str
    phase: Optional[str] = None
    containers: List[ContainerSnapshot] = Field(default_factory=list)
    container_ready: List[bool] = Field(default_factory=list)

    @property
    def all_containers_ready(self) -> bool:
        return bool(self.container_ready) and all(self.container_ready)


class InvolvedObject(BaseModel):
    kind: Optional[str] = None
    name: Optional[str] = None


class EventRecord(BaseModel):
    namespace: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    involved_object: InvolvedObject = Field(default_factory=InvolvedObject)
    count: Optional[int] = None
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None
