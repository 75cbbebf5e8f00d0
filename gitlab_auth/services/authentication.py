import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional

import requests
from gitlab.exceptions import GitlabAuthenticationError, GitlabError, GitlabHttpError

from ..config.settings import ConfigurationProvider
from ..core.exceptions import MalformedUserDataError
from ..core.gitlab_client import GitLabClientManager
from ..models.gitlab import (AuthenticationOutcome, ConnectionCheck, FailureKind,
                             GitLabUserDetails, GitLabUserInfo)
from .user_details import UserDetailsAdapter

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
PROTOCOL_ERROR_MESSAGE = "Unexpected response from GitLab server"


def _describe_error(error: Exception) -> str:
    """Describe an error without its text, which may hold a request URL and so a token."""
    if isinstance(error, MalformedUserDataError):
        return f"{type(error).__name__}: {error}"
    return type(error).__name__


class Authenticator(ABC):
    """Capability of turning a username and password into a principal."""

    @abstractmethod
    def authenticate(self, username: str, password: str) -> AuthenticationOutcome:
        """Authenticate the user, never raising for authentication failures."""


class GitLabAuthenticator(Authenticator):
    """Authenticates users against the configured GitLab server.

    The authenticator holds no mutable state; every call reads a fresh
    configuration snapshot through the client, so it can be shared between
    threads as long as the client can.
    """

    def __init__(self, config_provider: ConfigurationProvider,
                 client: Optional[GitLabClientManager] = None):
        self.config_provider = config_provider
        self.client = client or GitLabClientManager(config_provider)

    def authenticate(self, username: str, password: str) -> AuthenticationOutcome:
        """Log in to GitLab and build the principal of the user.

        Every failure is returned as an ``AuthenticationOutcome`` instead of
        raised: rejected credentials or any other non-2xx response give
        INVALID_CREDENTIALS, network errors and timeouts CONNECTION_ERROR,
        and unexpected payloads PROTOCOL_ERROR.
        """
        if not self._is_credential(username) or not self._is_credential(password):
            return AuthenticationOutcome.failed(
                FailureKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        try:
            info = self._login(username, password)
            principal = UserDetailsAdapter.from_user_info(info)
        except (GitlabAuthenticationError, GitlabHttpError) as e:
            logger.warning(f"GitLab rejected login for {username!r} "
                           f"(HTTP {e.response_code})")
            return AuthenticationOutcome.failed(
                FailureKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
        except requests.exceptions.RequestException as e:
            message = f"Unable to reach GitLab server ({_describe_error(e)})"
            logger.error(message)
            return AuthenticationOutcome.failed(FailureKind.CONNECTION_ERROR, message)
        except (MalformedUserDataError, GitlabError) as e:
            logger.error(f"Unexpected response from GitLab server ({_describe_error(e)})")
            return AuthenticationOutcome.failed(
                FailureKind.PROTOCOL_ERROR, PROTOCOL_ERROR_MESSAGE)

        logger.info(f"User {principal.username!r} authenticated against GitLab")
        return AuthenticationOutcome.succeeded(principal)

    def _login(self, username: str, password: str) -> GitLabUserInfo:
        session = self.client.login(username, password)
        if not session.private_token:
            raise MalformedUserDataError("Session response is missing 'private_token'")

        if session.email:
            return session

        # Session lacked the email, look it up with the new token
        user = self.client.get_current_user(session.private_token)
        if user.id != session.id:
            raise MalformedUserDataError(
                f"User id {user.id} does not match session user id {session.id}")

        return replace(user, private_token=session.private_token)

    def check_connection(self) -> ConnectionCheck:
        """Check that the configured server accepts the configured private token."""
        try:
            config = self.config_provider.get()
            if not config.has_private_token():
                return ConnectionCheck(False, "No private token configured")

            user = self.client.get_current_user(config.private_token)
        except (GitlabAuthenticationError, GitlabHttpError) as e:
            return ConnectionCheck(False, f"GitLab rejected the private token (HTTP {e.response_code})")
        except requests.exceptions.RequestException as e:
            return ConnectionCheck(False, f"Unable to reach GitLab server ({_describe_error(e)})")
        except Exception as e:
            return ConnectionCheck(False, f"Connection check failed ({_describe_error(e)})")

        return ConnectionCheck(True, f"Connected to GitLab as {user.username}")

    def verify_connection(self) -> bool:
        """Test GitLab connection, returning False on any failure."""
        result = self.check_connection()
        if not result.ok:
            logger.warning(f"GitLab connection check failed: {result.message}")
        return result.ok

    def find_user_details(self, private_token: str) -> Optional[GitLabUserDetails]:
        """Look up the principal owning a private token.

        This convenience accessor never fails: any error, including an
        unreachable server, is logged and reported as ``None``. Use
        ``authenticate`` where failures must be told apart.
        """
        if not private_token:
            return None

        try:
            info = self.client.get_current_user(private_token)
        except Exception as e:
            logger.info(f"Private token lookup failed ({_describe_error(e)})")
            return None

        return UserDetailsAdapter.from_user_info(replace(info, private_token=private_token))

    @staticmethod
    def _is_credential(value) -> bool:
        return isinstance(value, str) and value != ""
