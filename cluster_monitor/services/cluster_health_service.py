import asyncio
import logging
from typing import Iterable, List, Optional, Protocol

from cluster_monitor.api.schemas.monitoring import (
    ClusterHealth,
    ComponentStatus,
    HealthStatus,
    NodeStatus,
    NodeSummary,
)
from cluster_monitor.external.k8s_client import K8sClient
from cluster_monitor.models.cluster import NodeSnapshot, PodSnapshot

CONTROL_PLANE_COMPONENTS = (
    "kube-apiserver",
    "kube-scheduler",
    "kube-controller-manager",
    "etcd",
)


class ComponentMatcher(Protocol):
    """Décide si un pod système représente un composant du control plane"""

    def matches(self, pod: PodSnapshot) -> bool:
        ...


class NameSubstringMatcher:
    """Reconnaît un composant à une sous-chaîne de son nom de pod (kubeadm, minikube...)"""

    def __init__(self, components: Iterable[str] = CONTROL_PLANE_COMPONENTS):
        self.components = tuple(components)

    def matches(self, pod: PodSnapshot) -> bool:
        return any(component in pod.name for component in self.components)


class ClusterHealthService:
    """Calcule l'état de santé global du cluster à partir des noeuds et du control plane"""

    def __init__(
        self,
        k8s_client: K8sClient,
        logger: Optional[logging.Logger] = None,
        system_namespace: str = "kube-system",
        component_matcher: Optional[ComponentMatcher] = None,
    ):
        self.k8s_client = k8s_client
        self.logger = logger or logging.getLogger(__name__)
        self.system_namespace = system_namespace
        self.component_matcher = component_matcher or NameSubstringMatcher()

    async def get_cluster_health(self) -> ClusterHealth:
        """Récupère l'état des noeuds et des composants en parallèle"""
        try:
            nodes, components = await asyncio.gather(
                self.k8s_client.list_nodes(),
                self._get_component_statuses(),
            )
        except Exception as e:
            self.logger.error(f"Erreur lors de la récupération de la santé du cluster: {e}")
            raise

        details = [self._to_node_status(node) for node in nodes]
        healthy = sum(1 for node in nodes if node.ready)
        overall = HealthStatus.HEALTHY if healthy == len(nodes) else HealthStatus.DEGRADED

        self.logger.info(f"Santé du cluster: {overall.value} ({healthy}/{len(nodes)} noeuds prêts)")
        return ClusterHealth(
            overall=overall,
            nodes=NodeSummary(total=len(nodes), healthy=healthy, details=details),
            components=components,
        )

    @staticmethod
    def _to_node_status(node: NodeSnapshot) -> NodeStatus:
        return NodeStatus(
            name=node.name,
            status="Ready" if node.ready else "NotReady",
            conditions=node.conditions,
            capacity=node.capacity,
            allocatable=node.allocatable,
        )

    async def _get_component_statuses(self) -> List[ComponentStatus]:
        # L'API ComponentStatus est dépréciée: on se base sur les pods du namespace système
        try:
            system_pods = await self.k8s_client.list_pods(self.system_namespace)
        except Exception as e:
            self.logger.warning(f"Impossible de récupérer le statut des composants: {e}")
            return []

        return [
            ComponentStatus(name=pod.name, status=pod.phase, ready=pod.all_containers_ready)
            for pod in system_pods
            if self.component_matcher.matches(pod)
        ]
