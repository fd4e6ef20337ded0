import logging
from typing import Callable, Dict, List, Optional

from cluster_monitor.api.schemas.monitoring import (
    NamespaceResourceStats,
    PodSummary,
    RankingMode,
    ResourceUtilization,
    TopConsumers,
    UtilizationSummary,
)
from cluster_monitor.core.exceptions import QuantityParseError
from cluster_monitor.core.quantity import parse_cpu, parse_memory
from cluster_monitor.external.k8s_client import K8sClient
from cluster_monitor.models.cluster import ContainerSnapshot, PodSnapshot

BYTES_PER_GIB = 1024 ** 3
# Résolution du nanocoeur: évite les résidus flottants (0.1 + 0.2)
CPU_PRECISION = 9


def compat_score(stats: NamespaceResourceStats) -> float:
    # Coeurs et octets additionnés sans conversion: la mémoire domine toujours.
    # Conservé tel quel pour rester compatible avec les consommateurs existants.
    return stats.requested_cpu + stats.requested_memory


def normalized_score(stats: NamespaceResourceStats) -> float:
    return stats.requested_cpu + stats.requested_memory / BYTES_PER_GIB


RANKING_SCORES: Dict[RankingMode, Callable[[NamespaceResourceStats], float]] = {
    RankingMode.COMPAT: compat_score,
    RankingMode.NORMALIZED: normalized_score,
}


def rank_namespaces(
    stats: List[NamespaceResourceStats],
    limit: int,
    mode: RankingMode = RankingMode.COMPAT,
) -> List[NamespaceResourceStats]:
    """Tri décroissant (stable) par score, puis troncature à `limit`"""
    return sorted(stats, key=RANKING_SCORES[RankingMode(mode)], reverse=True)[:limit]


def _add_cores(total: float, cores: float) -> float:
    return round(total + cores, CPU_PRECISION)


class ResourceUtilizationService:
    """Agrège requests/limits des conteneurs par namespace"""

    def __init__(self, k8s_client: K8sClient, logger: Optional[logging.Logger] = None):
        self.k8s_client = k8s_client
        self.logger = logger or logging.getLogger(__name__)

    async def get_resource_utilization(self, namespace: Optional[str] = None) -> ResourceUtilization:
        """Statistiques par namespace et résumé global"""
        try:
            pods = await self.k8s_client.list_pods(namespace)
        except Exception as e:
            self.logger.error(f"Erreur lors de la récupération de l'utilisation des ressources: {e}")
            raise

        namespace_stats: Dict[str, NamespaceResourceStats] = {}
        for pod in pods:
            stats = namespace_stats.get(pod.namespace)
            if stats is None:
                stats = namespace_stats[pod.namespace] = NamespaceResourceStats(namespace=pod.namespace)
            self._accumulate(stats, pod)

        by_namespace = list(namespace_stats.values())
        summary = UtilizationSummary(
            total_namespaces=len(by_namespace),
            total_pods=len(pods),
            total_containers=sum(stats.containers for stats in by_namespace),
        )

        self.logger.info(
            f"Utilisation des ressources: {summary.total_pods} pods dans {summary.total_namespaces} namespaces"
        )
        return ResourceUtilization(by_namespace=by_namespace, summary=summary)

    async def get_top_consumers(
        self,
        namespace: Optional[str] = None,
        limit: int = 10,
        mode: RankingMode = RankingMode.COMPAT,
    ) -> TopConsumers:
        """Namespaces classés par consommation décroissante, tronqués après le tri"""
        utilization = await self.get_resource_utilization(namespace)

        ranked = rank_namespaces(utilization.by_namespace, limit, mode)
        return TopConsumers(top_namespaces=ranked, ranking_mode=mode)

    def _accumulate(self, stats: NamespaceResourceStats, pod: PodSnapshot) -> None:
        stats.pod_count += 1
        stats.containers += len(pod.containers)

        for container in pod.containers:
            stats.requested_cpu = _add_cores(stats.requested_cpu, self._cpu(container, pod, container.requests.get("cpu")))
            stats.requested_memory += self._memory(container, pod, container.requests.get("memory"))
            stats.limit_cpu = _add_cores(stats.limit_cpu, self._cpu(container, pod, container.limits.get("cpu")))
            stats.limit_memory += self._memory(container, pod, container.limits.get("memory"))

        stats.pods.append(PodSummary(name=pod.name, phase=pod.phase, containers=len(pod.containers)))

    def _cpu(self, container: ContainerSnapshot, pod: PodSnapshot, raw: Optional[str]) -> float:
        try:
            return parse_cpu(raw)
        except QuantityParseError as e:
            self._report(e, container, pod)
            return 0.0

    def _memory(self, container: ContainerSnapshot, pod: PodSnapshot, raw: Optional[str]) -> int:
        try:
            return parse_memory(raw)
        except QuantityParseError as e:
            self._report(e, container, pod)
            return 0

    def _report(self, error: QuantityParseError, container: ContainerSnapshot, pod: PodSnapshot) -> None:
        self.logger.warning(
            f"{error.message} pour le conteneur {container.name} du pod {pod.namespace}/{pod.name}, compté 0"
        )
