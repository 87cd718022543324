from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from gadash.client import ReportingService
from gadash.config import AuthConfig

if TYPE_CHECKING:
    from gadash.dashboard import Dashboard

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthRequest:
    client_id: str | None
    scope: str
    immediate: bool


Authorizer = Callable[[AuthRequest], str | None]
ClientFactory = Callable[[str], ReportingService]


def static_token_authorizer(token: str | None) -> Authorizer:
    def _authorize(request: AuthRequest) -> str | None:
        return token or None

    return _authorize


class AuthSession:
    """Runs the external authorization flow and opens the dashboard once it succeeds."""

    def __init__(
        self,
        dashboard: Dashboard,
        settings: AuthConfig,
        client_factory: ClientFactory,
    ) -> None:
        self.dashboard = dashboard
        self.settings = settings
        self.client_factory = client_factory

    def _request(self, immediate: bool) -> AuthRequest:
        return AuthRequest(
            client_id=self.settings.client_id,
            scope=self.settings.scope,
            immediate=immediate,
        )

    def check(self, authorizer: Authorizer) -> bool:
        return self.handle_result(authorizer(self._request(immediate=True)))

    def request_authorization(self, authorizer: Authorizer) -> bool:
        return self.handle_result(authorizer(self._request(immediate=False)))

    def handle_result(self, token: str | None) -> bool:
        if not token:
            LOGGER.info("Not authorized; %d chart(s) waiting", self.dashboard.gate.pending)
            self.dashboard.page.authorize_prompt = True
            return False
        if self.dashboard.client_ready:
            return True
        self.dashboard.open(self.client_factory(token))
        return True
