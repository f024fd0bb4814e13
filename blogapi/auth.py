# blogapi/auth.py
import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param

from blogapi.errors import AuthError
from blogapi.models.entities import User
from blogapi.repositories.base import CredentialStore

logger = logging.getLogger(__name__)

UNKNOWN_USERNAME = "unknown-username"
BAD_PASSWORD = "bad-password"


@dataclass(frozen=True)
class Verified:
    user: User


@dataclass(frozen=True)
class Rejected:
    reason: str


AuthOutcome = Union[Verified, Rejected]


class Authenticator(ABC):
    @abstractmethod
    async def authenticate(self, username: str, password: str) -> AuthOutcome:
        pass


class LocalAuthenticator(Authenticator):
    """Checks a username/password pair against the credential store."""

    def __init__(self, users: CredentialStore):
        self.users = users

    async def authenticate(self, username: str, password: str) -> AuthOutcome:
        user = await self.users.find_by_username(username)
        if user is None:
            return Rejected(UNKNOWN_USERNAME)
        if not await self.users.verify_password(password, user.password_digest):
            return Rejected(BAD_PASSWORD)
        return Verified(user)


def parse_basic_credentials(authorization: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split a ``Basic`` Authorization header into (username, password).

    Returns None for a missing header, another scheme, bad base64, bytes that
    are not UTF-8, or a decoded value without a colon.
    """
    scheme, param = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(param, validate=True).decode("utf-8")
    except ValueError:
        return None
    username, separator, password = decoded.partition(":")
    if not separator:
        return None
    return username, password


async def require_user(request: Request) -> User:
    """Resolve the authenticated user or fail with a generic 401.

    Unknown usernames and wrong passwords are told apart in the log only.
    """
    credentials = parse_basic_credentials(request.headers.get("Authorization"))
    if credentials is None:
        logger.warning(f"Rejected credentials on {request.method} {request.url.path}: missing or malformed")
        raise AuthError()

    username, password = credentials
    authenticator: Authenticator = request.app.state.context.authenticator
    outcome = await authenticator.authenticate(username, password)
    if isinstance(outcome, Rejected):
        logger.warning(f"Login failed for '{username}': {outcome.reason}")
        raise AuthError()
    return outcome.user
