"""Bearer credential verification against Supabase Auth.

IdentityResolver turns an Authorization header into an Identity by asking
the auth service who the token belongs to. Every call verifies the token
again; nothing is cached between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import httpx
import structlog

from src.meeting_ai.config import Settings, get_settings
from src.meeting_ai.core.exceptions import (
    InvalidCredential,
    MissingCredential,
    ServiceNotConfigured,
    UpstreamUnavailable,
)

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Identity:
    """Resolved caller identity for the current request."""

    id: str
    email: str


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        MissingCredential: Header absent, wrong scheme, or empty token.
    """
    if not authorization:
        raise MissingCredential("Authorization header is missing")
    if not authorization.lower().startswith(BEARER_PREFIX):
        raise MissingCredential("Authorization header must use the Bearer scheme")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredential("Bearer token is empty")
    return token


class IdentityResolver:
    """Validates bearer tokens with the Supabase Auth user endpoint.

    Args:
        auth_url: Supabase project URL (e.g. https://xyz.supabase.co).
        api_key: Supabase anon key sent as the ``apikey`` header.
        timeout: Transport timeout in seconds.
    """

    def __init__(self, auth_url: str, api_key: str, timeout: float = 10.0) -> None:
        self._auth_url = auth_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> IdentityResolver:
        return cls(
            auth_url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_ANON_KEY,
            timeout=float(settings.AUTH_TIMEOUT),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._auth_url)

    async def resolve(self, authorization: str | None) -> Identity:
        """Resolve the caller identity from an Authorization header.

        Raises:
            MissingCredential: No usable bearer token; no upstream call made.
            InvalidCredential: Token rejected, or no id/email in the answer.
            UpstreamUnavailable: Auth service unreachable or failing.
            ServiceNotConfigured: SUPABASE_URL is not set.
        """
        token = extract_bearer_token(authorization)

        if not self.is_configured:
            raise ServiceNotConfigured("Auth service URL not found in environment variables")

        headers = {"Authorization": f"Bearer {token}"}
        if self._api_key:
            headers["apikey"] = self._api_key

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._auth_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as exc:
            logger.error("auth.transport_error", error=str(exc))
            raise UpstreamUnavailable("auth", None, str(exc)) from exc

        if response.status_code in (401, 403):
            logger.info("auth.token_rejected", status_code=response.status_code)
            raise InvalidCredential()
        if not response.is_success:
            logger.error("auth.error_status", status_code=response.status_code)
            raise UpstreamUnavailable("auth", response.status_code, response.text)

        try:
            user = response.json()
        except ValueError:
            raise InvalidCredential("Auth service returned an unreadable user") from None

        user_id = user.get("id") if isinstance(user, dict) else None
        email = user.get("email") if isinstance(user, dict) else None
        if not user_id or not email:
            raise InvalidCredential("Token does not identify a user with an email")

        return Identity(id=str(user_id), email=str(email))


@lru_cache
def get_identity_resolver() -> IdentityResolver:
    """Get or create the resolver singleton from settings."""
    return IdentityResolver.from_settings(get_settings())
