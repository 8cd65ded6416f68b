"""Sign-up, sign-in and per-request auth context."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from macromate.config import username_to_email
from macromate.domain.models import AuthenticatedUser, AuthSession, UserProfile
from macromate.errors import AuthenticationError
from macromate.services.users import UserService

_logger = logging.getLogger(__name__)


class AuthClient(Protocol):
    """Interface for the hosted auth provider.

    Implementations raise `AuthenticationError` for bad credentials and
    `DuplicateAccountError` when signing up an existing email.
    """

    def sign_up(
        self, email: str, password: str, display_name: str
    ) -> AuthenticatedUser:
        """Create an account and return its identity."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""

    def get_user(self, access_token: str) -> AuthenticatedUser | None:
        """Return the identity behind an access token, if valid."""


@dataclass(frozen=True)
class AuthContext:
    """The signed-in user and profile handed to request handlers."""

    user: AuthenticatedUser
    profile: UserProfile

    @property
    def user_id(self) -> UUID:
        """Return the signed-in user's id."""
        return self.user.id


@dataclass
class AuthService:
    """Maps usernames onto the auth provider and loads profiles."""

    client: AuthClient
    user_service: UserService
    email_domain: str

    def sign_up(self, name: str, username: str, password: str) -> AuthSession:
        """Create an account and its profile, then sign in."""
        email = username_to_email(username, self.email_domain)
        user = self.client.sign_up(email, password, display_name=name)
        self.user_service.ensure_profile(user.id, email=email, display_name=name)
        _logger.info("Signed up user %s", user.id)
        return self.client.sign_in(email, password)

    def sign_in(self, username: str, password: str) -> AuthSession:
        """Sign in with a username and password."""
        email = username_to_email(username, self.email_domain)
        session = self.client.sign_in(email, password)
        self.user_service.ensure_profile(session.user.id, email=session.user.email)
        return session

    def resolve(self, access_token: str) -> AuthContext:
        """Build the auth context for a bearer token."""
        user = self.client.get_user(access_token)
        if user is None:
            raise AuthenticationError("Not signed in.")
        profile = self.user_service.ensure_profile(user.id, email=user.email)
        return AuthContext(user=user, profile=profile)
