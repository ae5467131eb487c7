import pytest

from app.proxy.auth import normalize_bearer, resolve_auth_token


class TestNormalizeBearer:
    def test_prefixed_value_passes_through(self):
        assert normalize_bearer("Bearer abc.def") == "Bearer abc.def"

    def test_raw_value_gets_prefix(self):
        assert normalize_bearer("abc.def") == "Bearer abc.def"

    @pytest.mark.parametrize("value", [None, "", "   ", "Bearer ", "Bearer    "])
    def test_empty_credentials_are_absent(self, value):
        assert normalize_bearer(value) is None

    def test_prefix_is_case_sensitive(self):
        # "bearer x" is not recognized as prefixed and is wrapped as-is
        assert normalize_bearer("bearer x") == "Bearer bearer x"


class TestResolveAuthToken:
    def test_header_with_prefix_unchanged(self):
        headers = {"Authorization": "Bearer header-token"}
        assert resolve_auth_token(headers, {}) == "Bearer header-token"

    def test_header_without_prefix(self):
        assert resolve_auth_token({"Authorization": "raw"}, {}) == "Bearer raw"

    def test_header_name_is_case_insensitive(self):
        assert resolve_auth_token({"authorization": "raw"}, {}) == "Bearer raw"
        assert resolve_auth_token({"AUTHORIZATION": "raw"}, {}) == "Bearer raw"

    def test_primary_cookie(self):
        assert resolve_auth_token({}, {"auth_token": "c1"}) == "Bearer c1"

    def test_legacy_cookie(self):
        assert resolve_auth_token({}, {"token": "c2"}) == "Bearer c2"

    def test_primary_cookie_wins_over_legacy(self):
        cookies = {"auth_token": "primary", "token": "legacy"}
        assert resolve_auth_token({}, cookies) == "Bearer primary"

    def test_header_wins_over_cookies(self):
        headers = {"Authorization": "Bearer from-header"}
        cookies = {"auth_token": "from-cookie", "token": "legacy"}
        assert resolve_auth_token(headers, cookies) == "Bearer from-header"

    def test_empty_header_falls_back_to_cookie(self):
        headers = {"Authorization": "Bearer "}
        assert resolve_auth_token(headers, {"token": "legacy"}) == "Bearer legacy"

    def test_empty_primary_cookie_falls_back_to_legacy(self):
        cookies = {"auth_token": "", "token": "legacy"}
        assert resolve_auth_token({}, cookies) == "Bearer legacy"

    def test_no_credentials(self):
        assert resolve_auth_token({}, {}) is None
        assert resolve_auth_token({"Accept": "application/json"}, {"theme": "dark"}) is None

    def test_custom_cookie_names(self):
        cookies = {"session_jwt": "custom", "auth_token": "ignored"}
        token = resolve_auth_token({}, cookies, ("session_jwt",))
        assert token == "Bearer custom"
