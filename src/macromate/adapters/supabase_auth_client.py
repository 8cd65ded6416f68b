"""Supabase Auth implementation of the auth provider."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthApiError, Client

from macromate.domain.models import AuthenticatedUser, AuthSession
from macromate.errors import AuthenticationError, DuplicateAccountError
from macromate.services.auth import AuthClient

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."
USERNAME_TAKEN_MESSAGE = "This username is already taken. Please choose another one."

_DUPLICATE_CODES = {"user_already_exists", "email_exists"}

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthClient(AuthClient):
    """Email/password auth against Supabase.

    Uses its own client so that signing users in never replaces the service
    credentials used for table and storage access.
    """

    client: Client

    def sign_up(
        self, email: str, password: str, display_name: str
    ) -> AuthenticatedUser:
        """Register an account, mapping an existing email to a duplicate error."""
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"display_name": display_name}},
                }
            )
        except AuthApiError as exc:
            if exc.code in _DUPLICATE_CODES or "already registered" in exc.message:
                raise DuplicateAccountError(USERNAME_TAKEN_MESSAGE) from exc
            _logger.warning("Sign-up rejected: %s", exc.message)
            raise AuthenticationError(exc.message) from exc
        user = response.user
        # Confirmed-email projects return an identity-less user for existing emails.
        if user is None or user.identities == []:
            raise DuplicateAccountError(USERNAME_TAKEN_MESSAGE)
        return AuthenticatedUser(id=UUID(user.id), email=user.email)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for access and refresh tokens."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as exc:
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE) from exc
        if response.session is None or response.user is None:
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return AuthSession(
            user=AuthenticatedUser(
                id=UUID(response.user.id), email=response.user.email
            ),
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
        )

    def get_user(self, access_token: str) -> AuthenticatedUser | None:
        """Return the identity behind an access token, or None if rejected."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError as exc:
            _logger.info("Rejected access token: %s", exc.message)
            return None
        if response is None or response.user is None:
            return None
        return AuthenticatedUser(id=UUID(response.user.id), email=response.user.email)
