from .base import BaseModel
from .cluster import (
    ContainerSnapshot,
    EventRecord,
    InvolvedObject,
    NodeCondition,
    NodeSnapshot,
    PodSnapshot,
)

__all__ = [
    "BaseModel",
    "ContainerSnapshot",
    "EventRecord",
    "InvolvedObject",
    "NodeCondition",
    "NodeSnapshot",
    "PodSnapshot",
]
