"""Bounded re-authentication around a single logical request.

A request is attempted with the current token. If the array reports the
session as expired the executor logs in again and retries exactly once; the
second outcome is final whatever it is.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import TypeVar

from .exceptions import AuthenticationError, ClientError, UnityError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Outcome(enum.Enum):
    SUCCESS = "success"
    AUTH_EXPIRED = "auth_expired"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


class Phase(enum.Enum):
    ATTEMPT = "attempt"
    REAUTHENTICATE = "reauthenticate"
    RETRY = "retry"


def classify(error: BaseException | None) -> Outcome:
    """Map a request failure onto the retry taxonomy."""

    if error is None:
        return Outcome.SUCCESS
    if isinstance(error, AuthenticationError):
        return Outcome.AUTH_EXPIRED
    if isinstance(error, ClientError):
        return Outcome.CLIENT_ERROR
    return Outcome.SERVER_ERROR


class RetryExecutor:
    """Drive the attempt / reauthenticate / retry phases for one client.

    Args:
        get_token: Returns the token the next attempt should use.
        reauthenticate: Logs in again; receives the token that was rejected.
    """

    def __init__(
        self,
        *,
        get_token: Callable[[], str | None],
        reauthenticate: Callable[[str | None], None],
    ) -> None:
        self._get_token = get_token
        self._reauthenticate = reauthenticate

    def execute(self, operation: Callable[[str | None], T], *, label: str = "") -> T:
        phase = Phase.ATTEMPT
        token = self._get_token()
        while True:
            if phase is Phase.REAUTHENTICATE:
                self._reauthenticate(token)
                token = self._get_token()
                phase = Phase.RETRY
                continue

            try:
                return operation(token)
            except UnityError as exc:
                outcome = classify(exc)
                if phase is Phase.ATTEMPT and outcome is Outcome.AUTH_EXPIRED:
                    logger.warning("Unity session expired during %s; logging in again", label or "request")
                    phase = Phase.REAUTHENTICATE
                    continue
                if phase is Phase.RETRY:
                    logger.warning("Retry of %s failed (%s)", label or "request", outcome.value)
                raise
