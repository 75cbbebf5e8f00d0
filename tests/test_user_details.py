import pytest
from gitlab_auth.core.exceptions import MalformedUserDataError
from gitlab_auth.models.gitlab import GitLabGroupInfo, GitLabUserDetails
from gitlab_auth.services.user_details import UserDetailsAdapter

USER_JSON = {
    "id": 2,
    "username": "username",
    "email": "user@example.com",
    "private_token": "0123456789abcdef"
}

class TestUserDetailsAdapter:
    """Test cases for UserDetailsAdapter."""

    def test_from_json(self):
        """Test building a principal from a user payload."""
        user = UserDetailsAdapter.from_json(USER_JSON)

        assert user == GitLabUserDetails(
            username="username",
            id=2,
            email="user@example.com",
            private_token="0123456789abcdef"
        )
        assert user.is_gitlab_authenticated
        assert user.provider == "gitlab"

    def test_from_json_is_deterministic(self):
        assert UserDetailsAdapter.from_json(dict(USER_JSON)) == UserDetailsAdapter.from_json(dict(USER_JSON))

    def test_from_json_ignores_extra_fields(self):
        payload = dict(USER_JSON, is_admin=True, avatar_url="http://localhost/a.png")
        assert UserDetailsAdapter.from_json(payload).id == 2

    def test_from_json_optional_fields_default_to_empty(self):
        user = UserDetailsAdapter.from_json({"id": 2, "username": "username", "email": None})

        assert user.email == ""
        assert user.private_token == ""

    def test_from_json_numeric_string_id(self):
        assert UserDetailsAdapter.from_json(dict(USER_JSON, id="42")).id == 42

    @pytest.mark.parametrize("missing", ["id", "username"])
    def test_from_json_missing_required_field(self, missing):
        """Test that missing required fields always fail."""
        payload = {key: value for key, value in USER_JSON.items() if key != missing}

        with pytest.raises(MalformedUserDataError, match=missing):
            UserDetailsAdapter.from_json(payload)

    def test_from_json_missing_required_field_without_optional_fields(self):
        with pytest.raises(MalformedUserDataError):
            UserDetailsAdapter.from_json({"username": "username"})
        with pytest.raises(MalformedUserDataError):
            UserDetailsAdapter.from_json({"id": 2})

    @pytest.mark.parametrize("bad_id", [True, 2.5, "two", "", None, [2], 2 ** 63])
    def test_from_json_invalid_id(self, bad_id):
        with pytest.raises(MalformedUserDataError):
            UserDetailsAdapter.from_json(dict(USER_JSON, id=bad_id))

    def test_from_json_largest_id(self):
        assert UserDetailsAdapter.from_json(dict(USER_JSON, id=2 ** 63 - 1)).id == 2 ** 63 - 1

    @pytest.mark.parametrize("bad_username", ["", None, 12])
    def test_from_json_invalid_username(self, bad_username):
        with pytest.raises(MalformedUserDataError, match="username"):
            UserDetailsAdapter.from_json(dict(USER_JSON, username=bad_username))

    def test_from_json_invalid_email_type(self):
        with pytest.raises(MalformedUserDataError, match="email"):
            UserDetailsAdapter.from_json(dict(USER_JSON, email=["user@example.com"]))

    def test_from_json_not_an_object(self):
        with pytest.raises(MalformedUserDataError, match="JSON object"):
            UserDetailsAdapter.from_json([USER_JSON])

    def test_group_info_from_json(self):
        group = UserDetailsAdapter.group_info_from_json(
            {"id": 1, "name": "Developers", "path": "developers"})

        assert group == GitLabGroupInfo(id=1, name="Developers", path="developers")

    def test_group_info_missing_path(self):
        with pytest.raises(MalformedUserDataError, match="path"):
            UserDetailsAdapter.group_info_from_json({"id": 1, "name": "Developers"})

    def test_principal_repr_hides_token(self):
        user = UserDetailsAdapter.from_json(USER_JSON)

        assert "0123456789abcdef" not in repr(user)
        assert "private_token" not in user.to_dict()
