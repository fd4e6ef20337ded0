import asyncio
from typing import Any, Awaitable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class Settled(Generic[T]):
    """Issue d'une tâche d'un fan-out: valeur ou exception, jamais les deux"""

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[Exception] = None):
        self.value = value
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.ok:
            return f"Settled(value={self.value!r})"
        return f"Settled(error={self.error!r})"


async def gather_settled(awaitables: Iterable[Awaitable[T]]) -> List[Settled[T]]:
    """Exécute les tâches en parallèle et collecte toutes les issues.

    Un échec n'annule pas les tâches soeurs. L'ordre des résultats suit
    l'ordre des awaitables. Une annulation (CancelledError) est propagée.
    """
    results: List[Any] = await asyncio.gather(*awaitables, return_exceptions=True)

    settled: List[Settled[T]] = []
    for result in results:
        if isinstance(result, Exception):
            settled.append(Settled(error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            settled.append(Settled(value=result))
    return settled
