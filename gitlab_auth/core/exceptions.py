class GitLabAuthError(Exception):
    """Base class for GitLab authentication errors."""


class ConfigurationError(GitLabAuthError, ValueError):
    """Invalid GitLab server configuration."""


class MalformedUserDataError(GitLabAuthError):
    """GitLab returned a user payload without the required fields."""

    def __init__(self, message: str, payload=None):
        super().__init__(message)
        self.payload = payload
