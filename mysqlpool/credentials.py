"""Credentials provider contract and lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol, runtime_checkable

from .models import ProviderNotFound

LOG = logging.getLogger(__name__)

USER_PROPERTY_NAME = "user"
PASSWORD_PROPERTY_NAME = "password"


@runtime_checkable
class CredentialsProvider(Protocol):
    """Supplies user/password pairs by logical name."""

    def get_credentials(self, name: str) -> Mapping[str, str]:
        """Return credentials keyed by the well-known property names."""


@dataclass(frozen=True, slots=True)
class Credentials:
    user: str | None = None
    password: str | None = field(default=None, repr=False)


class CredentialsProviderRegistry:
    """Credentials providers keyed by an optional bean name."""

    def __init__(self, providers: Mapping[str | None, CredentialsProvider] | None = None) -> None:
        self._providers: dict[str | None, CredentialsProvider] = dict(providers or {})

    def register(self, provider: CredentialsProvider, name: str | None = None) -> None:
        """Register a provider, optionally under a bean name."""

        if not isinstance(provider, CredentialsProvider):
            raise TypeError(f"{provider!r} does not implement get_credentials()")
        self._providers[name] = provider

    def register_many(self, providers: Iterable[tuple[str | None, CredentialsProvider]]) -> None:
        for name, provider in providers:
            self.register(provider, name)

    def find(self, name: str | None = None) -> CredentialsProvider:
        """Resolve a provider by bean name.

        Without a name, the provider registered without one wins; a registry
        holding a single provider returns it regardless of its name.
        """

        if name is not None:
            try:
                return self._providers[name]
            except KeyError:
                raise ProviderNotFound(f"Unable to find credentials provider named '{name}'") from None
        if None in self._providers:
            return self._providers[None]
        if len(self._providers) == 1:
            return next(iter(self._providers.values()))
        raise ProviderNotFound("Unable to find a default credentials provider")

    def __len__(self) -> int:
        return len(self._providers)


def resolve_credentials(
    registry: CredentialsProviderRegistry,
    provider: str | None,
    provider_bean: str | None = None,
    *,
    user: str | None = None,
    password: str | None = None,
) -> Credentials:
    """Overlay provider-supplied credentials on the explicitly configured ones.

    Only keys present in the provider's mapping replace the given values.
    """

    if provider is None:
        return Credentials(user=user, password=password)
    credentials = registry.find(provider_bean).get_credentials(provider)
    supplied_user = credentials.get(USER_PROPERTY_NAME)
    supplied_password = credentials.get(PASSWORD_PROPERTY_NAME)
    LOG.debug(
        "Resolved credentials from provider",
        extra={
            "provider": provider,
            "user_supplied": supplied_user is not None,
            "password_supplied": supplied_password is not None,
        },
    )
    return Credentials(
        user=supplied_user if supplied_user is not None else user,
        password=supplied_password if supplied_password is not None else password,
    )


__all__ = [
    "Credentials",
    "CredentialsProvider",
    "CredentialsProviderRegistry",
    "PASSWORD_PROPERTY_NAME",
    "USER_PROPERTY_NAME",
    "resolve_credentials",
]
