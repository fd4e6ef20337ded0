import logging
from typing import List, Optional, Sequence

from cluster_monitor.api.schemas.monitoring import (
    AggregatedLogs,
    ErrorLogs,
    ErrorLogSummary,
    LogFetchResult,
)
from cluster_monitor.core.fanout import gather_settled
from cluster_monitor.external.k8s_client import K8sClient

ERROR_PATTERNS = ("error", "exception", "fatal")
FETCH_ERROR = "Failed to fetch logs"


def match_error_lines(logs: str, patterns: Sequence[str] = ERROR_PATTERNS) -> List[str]:
    """Lignes contenant un des motifs, sans tenir compte de la casse"""
    return [
        line for line in logs.split("\n")
        if any(pattern in line.lower() for pattern in patterns)
    ]


class PodLogsService:
    """Agrège les logs de tous les pods d'un namespace"""

    def __init__(self, k8s_client: K8sClient, logger: Optional[logging.Logger] = None):
        self.k8s_client = k8s_client
        self.logger = logger or logging.getLogger(__name__)

    async def aggregate_logs(
        self,
        namespace: str,
        label_selector: Optional[str] = None,
        tail_lines: int = 100,
    ) -> AggregatedLogs:
        """Récupère en parallèle les logs de chaque pod; un échec n'affecte que son pod"""
        try:
            pods = await self.k8s_client.list_pods(namespace, label_selector)
        except Exception as e:
            self.logger.error(f"Erreur lors de l'agrégation des logs du namespace {namespace}: {e}")
            raise

        outcomes = await gather_settled(
            self.k8s_client.get_pod_log(namespace, pod.name, tail_lines) for pod in pods
        )

        logs: List[LogFetchResult] = []
        for pod, outcome in zip(pods, outcomes):
            if outcome.ok:
                logs.append(LogFetchResult(pod_name=pod.name, namespace=namespace, logs=outcome.value))
            else:
                self.logger.warning(f"Logs indisponibles pour le pod {namespace}/{pod.name}: {outcome.error}")
                logs.append(LogFetchResult(pod_name=pod.name, namespace=namespace, error=FETCH_ERROR))

        failed = sum(1 for result in logs if result.failed)
        self.logger.info(f"Logs agrégés pour {len(logs)} pods dans {namespace} ({failed} en échec)")
        return AggregatedLogs(logs=logs, pod_count=len(logs))

    async def get_error_logs(self, namespace: str, tail_lines: int = 100) -> ErrorLogs:
        """Lignes d'erreur par pod; les pods sans erreur ou en échec sont omis"""
        aggregated = await self.aggregate_logs(namespace, None, tail_lines)

        error_logs: List[ErrorLogSummary] = []
        for result in aggregated.logs:
            if result.failed:
                continue

            errors = match_error_lines(result.logs)
            if not errors:
                continue

            error_logs.append(ErrorLogSummary(
                pod_name=result.pod_name,
                namespace=result.namespace,
                error_count=len(errors),
                errors=errors,
            ))

        return ErrorLogs(error_logs=error_logs, pods_with_errors=len(error_logs))
