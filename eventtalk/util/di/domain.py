"""Domain layer DI providers."""

from dishka import Scope, provide

from eventtalk.domain.service import AccessPolicy
from eventtalk.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services hold no state, so one instance serves the whole app.
    """

    scope = Scope.APP

    @provide
    def get_access_policy(self) -> AccessPolicy:
        """Provide the capability gate shared by all caches."""
        return AccessPolicy()
