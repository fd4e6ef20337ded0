"""Parsing des quantités Kubernetes (CPU et mémoire).

- CPU: "500m" -> 0.5 coeur, "2" -> 2.0 coeurs
- Mémoire: "128Mi" -> 134217728 octets, "500M" -> 500000000 octets
"""
import re
from typing import Optional, Tuple

from cluster_monitor.core.exceptions import QuantityParseError

# Suffixes testés du plus long au plus court pour éviter "Mi" lu comme "M"
_MEMORY_MULTIPLIERS: Tuple[Tuple[str, int], ...] = (
    ("Ki", 1024),
    ("Mi", 1024 ** 2),
    ("Gi", 1024 ** 3),
    ("K", 1000),
    ("M", 1000 ** 2),
    ("G", 1000 ** 3),
)

_INTEGER = re.compile(r"^\+?\d+$")
_DECIMAL = re.compile(r"^\+?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _parse_int(numeral: str, raw: str, kind: str) -> int:
    numeral = numeral.strip()
    if not _INTEGER.match(numeral):
        raise QuantityParseError(raw, kind)
    return int(numeral)


def parse_cpu(raw: Optional[str]) -> float:
    """Convertit une quantité CPU en coeurs.

    Args:
        raw: Valeur brute ("100m", "1.5", "2") ou None

    Returns:
        Nombre de coeurs. 0 si la valeur est absente.

    Raises:
        QuantityParseError: si le nombre est mal formé
    """
    if not raw:
        return 0.0

    raw = str(raw).strip()
    if raw.endswith("m"):
        return _parse_int(raw[:-1], raw, "cpu") / 1000

    if not _DECIMAL.match(raw):
        raise QuantityParseError(raw, "cpu")
    return float(raw)


def parse_memory(raw: Optional[str]) -> int:
    """Convertit une quantité mémoire en octets.

    Args:
        raw: Valeur brute ("128Mi", "1Gi", "500M", "1024") ou None

    Returns:
        Nombre d'octets. 0 si la valeur est absente.

    Raises:
        QuantityParseError: si le nombre est mal formé
    """
    if not raw:
        return 0

    raw = str(raw).strip()
    for suffix, multiplier in sorted(_MEMORY_MULTIPLIERS, key=lambda item: len(item[0]), reverse=True):
        if raw.endswith(suffix):
            return _parse_int(raw[:-len(suffix)], raw, "memory") * multiplier

    return _parse_int(raw, raw, "memory")
