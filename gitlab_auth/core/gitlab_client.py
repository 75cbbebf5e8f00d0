import logging
import gitlab
from gitlab.exceptions import GitlabAuthenticationError, GitlabHttpError, GitlabParsingError
from typing import Any, Dict, List, Optional
from ..config.settings import ConfigurationProvider, ServerConfiguration
from .exceptions import MalformedUserDataError
from ..models.gitlab import GitLabGroupInfo, GitLabUserInfo
from ..services.user_details import UserDetailsAdapter

logger = logging.getLogger(__name__)

API_PATH = "/api/v3"


class GitLabClientManager:
    """Performs GitLab API calls against the configured server.

    A new ``gitlab.Gitlab`` is created for every call from a fresh
    configuration snapshot and closed when the call returns, so concurrent
    callers never share a connection and configuration changes take effect
    immediately.

    Errors are not translated here: non-2xx responses raise
    ``GitlabAuthenticationError``/``GitlabHttpError``, invalid JSON raises
    ``GitlabParsingError``, requests raises ``RequestException`` for network
    failures and timeouts, and a payload with the wrong shape raises
    ``MalformedUserDataError``.
    """

    def __init__(self, config_provider: ConfigurationProvider):
        self.config_provider = config_provider

    def _create_client(self, config: ServerConfiguration) -> gitlab.Gitlab:
        """Create an unauthenticated GitLab client for one request."""
        return gitlab.Gitlab(config.server_url, timeout=config.timeout)

    @staticmethod
    def _api_url(config: ServerConfiguration, endpoint: str) -> str:
        # python-gitlab passes absolute URLs through unchanged
        return f"{config.server_url}{API_PATH}{endpoint}"

    def _get(self, endpoint: str, query_data: Optional[Dict[str, Any]] = None) -> Any:
        config = self.config_provider.get()
        with self._create_client(config) as gl:
            return gl.http_get(
                self._api_url(config, endpoint),
                query_data=query_data,
                obey_rate_limit=False
            )

    def _post_form(self, endpoint: str, form_data: Dict[str, Any]) -> Any:
        """POST a form-encoded body and return the decoded JSON response."""
        config = self.config_provider.get()
        with self._create_client(config) as gl:
            # http_post always JSON-encodes post_data
            response = gl.session.post(
                self._api_url(config, endpoint),
                data=form_data,
                timeout=config.timeout
            )

        logger.debug(f"POST {endpoint} returned HTTP {response.status_code}")
        if response.status_code == 401:
            raise GitlabAuthenticationError(
                error_message=response.reason,
                response_code=response.status_code,
                response_body=response.content
            )
        if not 200 <= response.status_code < 300:
            raise GitlabHttpError(
                error_message=response.reason,
                response_code=response.status_code,
                response_body=response.content
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitlabParsingError(error_message="Failed to parse the server message") from e

    def get_current_user(self, private_token: str) -> GitLabUserInfo:
        """Get the user owning the given private token."""
        payload = self._get("/user", query_data={"private_token": private_token})
        return UserDetailsAdapter.user_info_from_json(payload)

    def login(self, username: str, password: str) -> GitLabUserInfo:
        """Exchange username and password for a GitLab session."""
        payload = self._post_form("/session", {"login": username, "password": password})
        return UserDetailsAdapter.user_info_from_json(payload)

    def get_groups(self, private_token: str) -> List[GitLabGroupInfo]:
        """Get the groups visible to the owner of the given private token."""
        payload = self._get("/groups", query_data={"private_token": private_token})
        if not isinstance(payload, list):
            raise MalformedUserDataError(
                f"Expected a JSON array of groups, got {type(payload).__name__}", payload)
        return [UserDetailsAdapter.group_info_from_json(group) for group in payload]
