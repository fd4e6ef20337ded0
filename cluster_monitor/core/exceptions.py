from typing import Any, Dict, Optional


class MonitoringError(Exception):
    """Erreur de base du moteur de monitoring"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(MonitoringError):
    """Ressource adressée (pod, namespace) introuvable"""

    status_code = 404


class CollaboratorUnavailableError(MonitoringError):
    """L'API Kubernetes est injoignable ou a répondu par une erreur autre que 404"""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message, details={"upstreamStatus": upstream_status} if upstream_status else None)
        self.upstream_status = upstream_status


class QuantityParseError(MonitoringError, ValueError):
    """Une quantité CPU/mémoire ne correspond à aucun format reconnu"""

    status_code = 400

    def __init__(self, raw: str, kind: str):
        super().__init__(f"Quantité {kind} invalide: {raw!r}")
        self.raw = raw
        self.kind = kind
