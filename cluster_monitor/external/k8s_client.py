import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from cluster_monitor.core.exceptions import CollaboratorUnavailableError, NotFoundError
from cluster_monitor.models.cluster import (
    ContainerSnapshot,
    EventRecord,
    InvolvedObject,
    NodeCondition,
    NodeSnapshot,
    PodSnapshot,
)

logger = logging.getLogger(__name__)


class K8sClient:
    """Fournisseur d'état du cluster: lectures asynchrones sur l'API Kubernetes.

    Le client `kubernetes` est synchrone, chaque appel est donc exécuté dans un
    thread (`asyncio.to_thread`). Aucun état n'est modifié localement, les
    lectures concurrentes ne nécessitent pas de verrou.
    """

    def __init__(
        self,
        core_v1: Optional[client.CoreV1Api] = None,
        request_timeout: Optional[float] = 30.0,
        kubeconfig_path: Optional[str] = None,
        context: Optional[str] = None,
    ):
        self.request_timeout = request_timeout

        if core_v1 is None:
            self._load_config(kubeconfig_path, context)
            core_v1 = client.CoreV1Api()
        self.v1 = core_v1

    @staticmethod
    def _load_config(kubeconfig_path: Optional[str], context: Optional[str]) -> None:
        try:
            config.load_incluster_config()
            logger.info("Configuration Kubernetes in-cluster chargée")
        except ConfigException:
            try:
                config.load_kube_config(config_file=kubeconfig_path, context=context)
                logger.info("Configuration Kubernetes chargée depuis le kubeconfig")
            except Exception as e:
                logger.error(f"Impossible de charger la configuration Kubernetes: {e}")
                raise CollaboratorUnavailableError(
                    f"Configuration Kubernetes introuvable ou invalide ({e})"
                ) from e

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Exécute un appel de l'API et traduit ses erreurs en erreurs du domaine"""
        if self.request_timeout is not None:
            kwargs.setdefault("_request_timeout", self.request_timeout)
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"{operation}: ressource introuvable") from e
            raise CollaboratorUnavailableError(
                f"{operation}: l'API Kubernetes a répondu {e.status} ({e.reason})",
                upstream_status=e.status,
            ) from e
        except (Urllib3HTTPError, OSError) as e:
            raise CollaboratorUnavailableError(f"{operation}: API Kubernetes injoignable ({e})") from e

    async def health_check(self) -> bool:
        """Vérifie que l'API répond en listant les namespaces"""
        await self._call("list_namespace", self.v1.list_namespace, limit=1)
        logger.info("Connexion Kubernetes vérifiée")
        return True

    async def list_nodes(self) -> List[NodeSnapshot]:
        """Récupère la liste des noeuds"""
        response = await self._call("list_node", self.v1.list_node)
        return [self._to_node(node) for node in response.items]

    async def list_pods(
        self,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> List[PodSnapshot]:
        """Récupère les pods d'un namespace, ou de tout le cluster"""
        kwargs: Dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        if namespace:
            response = await self._call(
                "list_namespaced_pod", self.v1.list_namespaced_pod, namespace, **kwargs
            )
        else:
            response = await self._call(
                "list_pod_for_all_namespaces", self.v1.list_pod_for_all_namespaces, **kwargs
            )
        return [self._to_pod(pod) for pod in response.items]

    async def get_pod_log(self, namespace: str, pod_name: str, tail_lines: int) -> str:
        """Récupère les dernières lignes de log d'un pod"""
        return await self._call(
            "read_namespaced_pod_log", self._read_pod_log, pod_name, namespace, tail_lines=tail_lines
        )

    def _read_pod_log(self, pod_name: str, namespace: str, **kwargs) -> str:
        # Corps brut: le décodage strict du client échoue sur un octet non UTF-8
        response = self.v1.read_namespaced_pod_log(pod_name, namespace, _preload_content=False, **kwargs)
        try:
            return (response.data or b"").decode("utf-8", errors="replace")
        finally:
            response.release_conn()

    async def list_events(self, namespace: Optional[str] = None) -> List[EventRecord]:
        """Récupère les événements d'un namespace, ou de tout le cluster"""
        if namespace:
            response = await self._call(
                "list_namespaced_event", self.v1.list_namespaced_event, namespace
            )
        else:
            response = await self._call(
                "list_event_for_all_namespaces", self.v1.list_event_for_all_namespaces
            )
        return [self._to_event(event) for event in response.items]

    @staticmethod
    def _to_node(node: Any) -> NodeSnapshot:
        status = node.status
        return NodeSnapshot(
            name=node.metadata.name,
            conditions=[
                NodeCondition(type=c.type, status=c.status, reason=c.reason)
                for c in ((status.conditions if status else None) or [])
            ],
            capacity=dict((status.capacity if status else None) or {}),
            allocatable=dict((status.allocatable if status else None) or {}),
        )

    @staticmethod
    def _to_pod(pod: Any) -> PodSnapshot:
        containers = []
        for container in (pod.spec.containers if pod.spec else None) or []:
            resources = container.resources
            containers.append(ContainerSnapshot(
                name=container.name,
                requests=dict((resources.requests if resources else None) or {}),
                limits=dict((resources.limits if resources else None) or {}),
            ))

        statuses = (pod.status.container_statuses if pod.status else None) or []
        return PodSnapshot(
            name=pod.metadata.name,
            namespace=pod.metadata.namespace,
            phase=pod.status.phase if pod.status else None,
            containers=containers,
            container_ready=[bool(cs.ready) for cs in statuses],
        )

    @staticmethod
    def _to_event(event: Any) -> EventRecord:
        involved = event.involved_object
        return EventRecord(
            namespace=event.metadata.namespace,
            name=event.metadata.name,
            type=event.type,
            reason=event.reason,
            message=event.message,
            involved_object=InvolvedObject(
                kind=involved.kind if involved else None,
                name=involved.name if involved else None,
            ),
            count=event.count,
            first_timestamp=event.first_timestamp,
            # Les événements events.k8s.io n'ont parfois que event_time
            last_timestamp=event.last_timestamp or event.event_time,
        )
