"""
Mecanisme de retry avec backoff exponentiel pour les appels au fournisseur.

Le client fournisseur ne relance jamais lui-meme : une reponse 429 y est
convertie en RateLimited. C'est l'appelant (l'orchestrateur de
synchronisation) qui decide de relancer, via ce module.

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=3, max_wait=30)
    async def fetch_season():
        ...

    # Avec la fonction helper
    detail = await call_with_retry(provider.fetch_season_details, "1399", 1)
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar

from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from curator.core.errors import RateLimited

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


def _wait_strategy(max_wait: int) -> Callable[[RetryCallState], float]:
    """
    Attente entre deux tentatives.

    Respecte le header Retry-After quand le fournisseur le renvoie (borne par
    max_wait), sinon backoff exponentiel avec jitter.
    """
    fallback = wait_random_exponential(multiplier=1, min=1, max=max_wait)

    def _wait(retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimited) and exc.retry_after:
            return float(min(exc.retry_after, max_wait))
        return fallback(retry_state)

    return _wait


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Rate limit fournisseur, nouvelle tentative",
        attempt=retry_state.attempt_number,
        wait=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
    )


def with_retry(
    max_attempts: int = 3,
    max_wait: int = 30,
    sleep: Optional[SleepFunc] = None,
):
    """
    Decorateur pour relancer sur RateLimited avec backoff exponentiel.

    Les autres erreurs (ProviderUnavailable 4xx/5xx, reseau) sont propagees
    immediatement sans retry.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 30)
        sleep: Fonction d'attente async (injectable pour les tests)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    kwargs: dict[str, Any] = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return retry(
        retry=retry_if_exception_type(RateLimited),
        wait=_wait_strategy(max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )


async def call_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    max_wait: int = 30,
    sleep: Optional[SleepFunc] = None,
) -> T:
    """
    Appelle une coroutine du fournisseur avec retry automatique sur 429.

    Args:
        func: Methode async du fournisseur
        *args: Arguments positionnels passes a func
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives
        sleep: Fonction d'attente async (injectable pour les tests)

    Returns:
        Le resultat de func

    Raises:
        RateLimited: Si 429 apres epuisement des tentatives
        ProviderUnavailable: Pour les autres erreurs, sans retry
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait, sleep=sleep)
    async def _do_call() -> T:
        return await func(*args)

    return await _do_call()
