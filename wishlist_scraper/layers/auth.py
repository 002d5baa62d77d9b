"""
Authentication Layer for the Wishlist Scraper service.
Validates bearer tokens against the identity provider (Supabase Auth).
"""
from typing import Optional
from dataclasses import dataclass
from enum import Enum

import httpx

from wishlist_scraper.config import config
from wishlist_scraper.errors import Unauthorized
from wishlist_scraper.utils.logger import LayerLogger


class AuthStatus(str, Enum):
    """Outcome of a token check."""
    AUTHORIZED = "authorized"
    SKIPPED = "skipped"  # provider not configured or auth disabled
    MISSING_TOKEN = "missing_token"


@dataclass
class AuthResult:
    """Result of validating one request's credentials."""
    status: AuthStatus
    user_id: Optional[str] = None


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class AuthenticationLayer:
    """
    Authentication Layer - gates the scrape endpoint on a signed-in user.

    RULES:
    - Active only when the identity provider is configured and
      REQUIRE_AUTH is on
    - Otherwise every request passes, with a warning logged
    - Tokens are never logged
    """

    USER_ENDPOINT = "/auth/v1/user"

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        required: Optional[bool] = None,
        timeout: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = LayerLogger("auth_layer")
        self.supabase_url = supabase_url if supabase_url is not None else config.SUPABASE_URL
        self.supabase_key = supabase_key if supabase_key is not None else config.SUPABASE_ANON_KEY
        self.required = config.REQUIRE_AUTH if required is None else required
        self.timeout = timeout
        self.transport = transport

    def is_configured(self) -> bool:
        """Check if the identity provider is configured."""
        return bool(self.supabase_url and self.supabase_key)

    def get_missing_settings(self) -> list:
        """Return names of identity provider settings that are unset."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing

    def is_enforced(self) -> bool:
        """Check if requests must carry a valid token."""
        return self.required and self.is_configured()

    async def validate_token(self, token: str) -> str:
        """
        Validate a bearer token with the identity provider.

        Args:
            token: The bearer token from the request

        Returns:
            The authenticated user's ID

        Raises:
            Unauthorized: The provider rejected the token or could not be reached
        """
        url = f"{self.supabase_url.rstrip('/')}{self.USER_ENDPOINT}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    url,
                    headers={
                        "apikey": self.supabase_key,
                        "Authorization": f"Bearer {token}",
                    }
                )
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Identity provider unreachable: {str(e)}",
                error_type="auth_provider_error"
            )
            raise Unauthorized() from e

        if response.status_code != 200:
            self.logger.log_error(
                "Token rejected by identity provider",
                error_type="invalid_token",
                status_code=response.status_code
            )
            raise Unauthorized()

        try:
            payload = response.json()
        except ValueError as e:
            raise Unauthorized() from e

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise Unauthorized()

        return str(user_id)

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        """
        Check the Authorization header of a request.

        Args:
            authorization: Raw Authorization header value

        Returns:
            AuthResult (AUTHORIZED or SKIPPED)

        Raises:
            Unauthorized: Token missing or invalid while auth is enforced
        """
        if not self.is_enforced():
            self.logger.log_warning(
                "auth_skipped",
                reason="auth_disabled" if self.is_configured() else "identity_provider_not_configured",
                missing_variables=self.get_missing_settings()
            )
            return AuthResult(status=AuthStatus.SKIPPED)

        token = parse_bearer_token(authorization)
        if not token:
            self.logger.log_decision(
                decision="reject_request",
                reason=AuthStatus.MISSING_TOKEN.value
            )
            raise Unauthorized()

        user_id = await self.validate_token(token)

        self.logger.log_action(
            "token_validation",
            "completed",
            user_id=user_id
        )

        return AuthResult(status=AuthStatus.AUTHORIZED, user_id=user_id)
