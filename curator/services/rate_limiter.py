"""
Limiteur de cadence (token bucket) pour les appels au fournisseur.

Espace les unites d'un lot : avec la capacite par defaut (1 jeton), la
premiere acquisition est immediate et les suivantes attendent `interval`
secondes depuis la precedente.

L'horloge et la fonction d'attente sont injectables, ce qui permet de
tester la cadence avec une horloge simulee sans attendre reellement.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from curator.utils.constants import DEFAULT_SYNC_PACING_SECONDS


class TokenBucket:
    """
    Token bucket asynchrone.

    Attributes:
        interval: Secondes necessaires pour regenerer un jeton (0 = pas de limite)
        capacity: Nombre maximum de jetons accumules (rafale autorisee)

    Example:
        limiter = TokenBucket(interval=0.3)
        for season in seasons:
            await limiter.acquire()
            await sync(season)
    """

    def __init__(
        self,
        interval: float = DEFAULT_SYNC_PACING_SECONDS,
        capacity: int = 1,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval doit etre positif ou nul")
        if capacity < 1:
            raise ValueError("capacity doit etre >= 1")
        self.interval = interval
        self.capacity = capacity
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._tokens = float(capacity)
        self._last = self._clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._last = now
        self._tokens = min(float(self.capacity), self._tokens + elapsed / self.interval)

    async def acquire(self) -> float:
        """
        Consomme un jeton, en attendant si necessaire.

        Returns:
            Duree d'attente en secondes (0.0 si immediat)
        """
        if self.interval == 0:
            return 0.0

        async with self._lock:
            self._refill()
            waited = 0.0
            if self._tokens < 1:
                waited = (1 - self._tokens) * self.interval
                await self._sleep(waited)
                self._refill()
                # L'attente couvre le deficit meme si l'horloge n'a pas avance
                self._tokens = max(self._tokens, 1.0)
            self._tokens -= 1
            return waited

    def reset(self) -> None:
        """Remet le seau plein (nouvelle session de synchronisation)."""
        self._tokens = float(self.capacity)
        self._last = self._clock()
