"""Credential verifiers.

The login flow treats verification as a black box ``(username, password) ->
bool``. Real deployments plug in a backend verifier with password hashing.
"""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod


class AbstractCredentialVerifier(ABC):
    """Interface for credential checks."""

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        raise NotImplementedError


class DemoCredentialVerifier(AbstractCredentialVerifier):
    """Accept any username whose password equals one shared demo secret."""

    def __init__(self, demo_password: str) -> None:
        if not demo_password:
            raise ValueError("demo_password must be a non-empty string")
        self._expected = demo_password.encode("utf-8")

    def verify(self, username: str, password: str) -> bool:
        return hmac.compare_digest(str(password or "").encode("utf-8"), self._expected)
