from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class GitLabUserInfo:
    """GitLab user as returned by the user and session endpoints"""
    id: int
    username: str
    email: str = ""
    private_token: str = ""
    name: str = ""
    state: str = ""


@dataclass(frozen=True)
class GitLabGroupInfo:
    """GitLab group data model"""
    id: int
    name: str
    path: str


@dataclass(frozen=True)
class GitLabUserDetails:
    """Principal of a user authenticated against GitLab"""
    username: str
    id: int
    email: str
    private_token: str

    provider = "gitlab"

    @property
    def is_gitlab_authenticated(self) -> bool:
        return True

    def __repr__(self) -> str:
        # keep the token out of logs and tracebacks
        return (f"GitLabUserDetails(username={self.username!r}, id={self.id!r}, "
                f"email={self.email!r})")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, without the private token"""
        return {
            'username': self.username,
            'id': self.id,
            'email': self.email,
            'provider': self.provider
        }


class FailureKind(Enum):
    """Reason an authentication attempt failed"""
    INVALID_CREDENTIALS = "invalid_credentials"
    CONNECTION_ERROR = "connection_error"
    PROTOCOL_ERROR = "protocol_error"


@dataclass(frozen=True)
class AuthenticationOutcome:
    """Result of an authentication attempt"""
    principal: Optional[GitLabUserDetails] = None
    failure: Optional[FailureKind] = None
    message: str = ""

    def __post_init__(self):
        if (self.principal is None) == (self.failure is None):
            raise ValueError("An outcome holds either a principal or a failure")

    @classmethod
    def succeeded(cls, principal: GitLabUserDetails) -> 'AuthenticationOutcome':
        return cls(principal=principal)

    @classmethod
    def failed(cls, failure: FailureKind, message: str) -> 'AuthenticationOutcome':
        return cls(failure=failure, message=message)

    @property
    def success(self) -> bool:
        return self.principal is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'success': self.success,
            'principal': self.principal.to_dict() if self.principal else None,
            'failure': self.failure.value if self.failure else None,
            'message': self.message
        }


@dataclass(frozen=True)
class ConnectionCheck:
    """Result of a connectivity check against the configured server"""
    ok: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok
