"""
Protocol module abstraction shared by handshake protocol implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from keyless_scraper.config.models import ScraperConfiguration
from keyless_scraper.types import (
    AuthenticationFlow,
    CredentialValidationResult,
    ExecutionContext,
    ExecutionResult,
    HealthCheckResult,
    RevocationResult,
    TokenRefreshResult,
)

Credentials = ScraperConfiguration | Mapping[str, Any]


@dataclass(frozen=True)
class ProtocolMetadata:
    """
    Descriptive metadata a protocol module publishes to the registry.
    """

    type: str
    display_name: str
    description: str
    version: str
    capabilities: dict[str, bool] = field(default_factory=dict)
    use_cases: list[str] = field(default_factory=list)


class ProtocolModule(ABC):
    """
    Contract every protocol module exposes to the handshake layer.
    """

    protocol_type: str

    @abstractmethod
    def get_metadata(self) -> ProtocolMetadata:
        """
        Describe the module and its capabilities.
        """

    @abstractmethod
    def validate_credentials(self, credentials: Mapping[str, Any]) -> CredentialValidationResult:
        """
        Validate a credentials mapping without side effects.
        """

    @abstractmethod
    async def authenticate(self, credentials: Credentials) -> AuthenticationFlow:
        """
        Start or complete the authentication flow.
        """

    @abstractmethod
    async def execute_request(self, context: ExecutionContext) -> ExecutionResult:
        """
        Run one request with the module's authentication applied.
        """

    @abstractmethod
    async def health_check(self, credentials: Credentials | None = None) -> HealthCheckResult:
        """
        Probe the configured target.
        """

    @abstractmethod
    async def refresh_tokens(self, credentials: Credentials | None = None) -> TokenRefreshResult:
        """
        Refresh credentials where the protocol has any.
        """

    @abstractmethod
    async def revoke_tokens(self, credentials: Credentials | None = None) -> RevocationResult:
        """
        Revoke credentials and drop any session state.
        """

    @abstractmethod
    def is_token_expired(self, credentials: Credentials | None = None) -> bool:
        """
        Report whether credentials need refreshing.
        """

    def get_token_expiration_time(self, credentials: Credentials | None = None) -> datetime | None:
        return None
