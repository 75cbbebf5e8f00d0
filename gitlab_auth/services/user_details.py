from typing import Any, Mapping, Optional

from ..core.exceptions import MalformedUserDataError
from ..models.gitlab import GitLabGroupInfo, GitLabUserDetails, GitLabUserInfo

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class UserDetailsAdapter:
    """Converts GitLab JSON payloads into user models and principals.

    All methods are pure: no network access, no shared state.
    """

    @classmethod
    def from_json(cls, payload: Any) -> GitLabUserDetails:
        """Build a principal from a GitLab user or session payload."""
        return cls.from_user_info(cls.user_info_from_json(payload))

    @staticmethod
    def from_user_info(info: GitLabUserInfo) -> GitLabUserDetails:
        return GitLabUserDetails(
            username=info.username,
            id=info.id,
            email=info.email,
            private_token=info.private_token
        )

    @classmethod
    def user_info_from_json(cls, payload: Any) -> GitLabUserInfo:
        """Parse a user payload, requiring a numeric id and a non-empty username."""
        data = cls._require_mapping(payload)

        return GitLabUserInfo(
            id=cls._parse_id(data),
            username=cls._required_string(data, "username"),
            email=cls._optional_string(data, "email"),
            private_token=cls._optional_string(data, "private_token"),
            name=cls._optional_string(data, "name"),
            state=cls._optional_string(data, "state")
        )

    @classmethod
    def group_info_from_json(cls, payload: Any) -> GitLabGroupInfo:
        data = cls._require_mapping(payload)

        return GitLabGroupInfo(
            id=cls._parse_id(data),
            name=cls._required_string(data, "name"),
            path=cls._required_string(data, "path")
        )

    @staticmethod
    def _require_mapping(payload: Any) -> Mapping[str, Any]:
        if not isinstance(payload, Mapping):
            raise MalformedUserDataError(
                f"Expected a JSON object, got {type(payload).__name__}", payload)
        return payload

    @staticmethod
    def _parse_id(data: Mapping[str, Any]) -> int:
        if "id" not in data:
            raise MalformedUserDataError("Missing required field 'id'", data)

        value = data["id"]
        # bool is a subclass of int
        if isinstance(value, bool):
            raise MalformedUserDataError("Field 'id' must be an integer", data)

        if isinstance(value, int):
            parsed = value
        elif isinstance(value, str) and value.isascii() and value.isdigit():
            parsed = int(value)
        else:
            raise MalformedUserDataError("Field 'id' must be an integer", data)

        if not INT64_MIN <= parsed <= INT64_MAX:
            raise MalformedUserDataError("Field 'id' is out of range", data)

        return parsed

    @staticmethod
    def _required_string(data: Mapping[str, Any], key: str) -> str:
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise MalformedUserDataError(f"Missing required field '{key}'", data)
        return value

    @staticmethod
    def _optional_string(data: Mapping[str, Any], key: str) -> str:
        value: Optional[Any] = data.get(key)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise MalformedUserDataError(f"Field '{key}' must be a string", data)
        return value
