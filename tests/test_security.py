"""
Tests for credential checks and stored-credential encryption
"""
import time

import pytest
from jose import jwt
from starlette.requests import Request

from docrelay.config import Settings
from docrelay.core.crypto import decrypt_value, encrypt_value
from docrelay.core.security import (
    BearerTokenResolver,
    credential_name,
    extract_credential,
    is_admin_secret_valid,
)


def make_request(headers):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/proxy",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


class TestAdminSecret:

    def test_exact_match(self):
        assert is_admin_secret_valid("s3cret", "s3cret")

    @pytest.mark.parametrize("provided", [None, "", "s3cret ", "S3CRET", "s3cre"])
    def test_mismatch(self, provided):
        assert not is_admin_secret_valid(provided, "s3cret")

    @pytest.mark.parametrize("provided", [None, "", "anything"])
    def test_unset_server_secret_never_matches(self, provided):
        assert not is_admin_secret_valid(provided, None)
        assert not is_admin_secret_valid(provided, "")


class TestBearerTokenResolver:

    SECRET = "jwt-secret"

    @pytest.fixture
    def resolver(self):
        return BearerTokenResolver(self.SECRET)

    def test_scoped_token(self, resolver):
        token = jwt.encode({"sub": "u1", "project_id": "gameDB"}, self.SECRET, algorithm="HS256")

        scope = resolver.resolve(token)

        assert scope.project_id == "gameDB"
        assert scope.subject == "u1"
        assert not scope.is_unrestricted

    def test_unscoped_token(self, resolver):
        token = jwt.encode({"sub": "u1"}, self.SECRET, algorithm="HS256")
        assert resolver.resolve(token).is_unrestricted

    def test_custom_claim(self):
        resolver = BearerTokenResolver(self.SECRET, project_claim="tenant")
        token = jwt.encode({"sub": "u1", "tenant": "gameDB"}, self.SECRET, algorithm="HS256")
        assert resolver.resolve(token).project_id == "gameDB"

    def test_expired_token(self, resolver):
        token = jwt.encode({"sub": "u1", "exp": int(time.time()) - 60}, self.SECRET, algorithm="HS256")
        assert resolver.resolve(token) is None

    def test_garbage(self, resolver):
        assert resolver.resolve("not.a.jwt") is None

    def test_no_secret_configured(self):
        token = jwt.encode({"sub": "u1"}, self.SECRET, algorithm="HS256")
        assert BearerTokenResolver(None).resolve(token) is None


class TestExtractCredential:

    def test_api_key_header(self):
        settings = Settings(AUTH_MODE="api_key")
        request = make_request({"X-API-Key": "proxy_abc", "Authorization": "Bearer xyz"})

        assert extract_credential(request, settings) == "proxy_abc"
        assert credential_name(settings) == "API Key"

    def test_empty_api_key_is_missing(self):
        assert extract_credential(make_request({"X-API-Key": ""}), Settings(AUTH_MODE="api_key")) is None

    def test_bearer_header(self):
        settings = Settings(AUTH_MODE="bearer")
        request = make_request({"Authorization": "Bearer xyz", "X-API-Key": "proxy_abc"})

        assert extract_credential(request, settings) == "xyz"
        assert credential_name(settings) == "bearer token"

    @pytest.mark.parametrize("value", ["xyz", "Basic xyz", "Bearer ", "Bearer"])
    def test_malformed_authorization(self, value):
        assert extract_credential(make_request({"Authorization": value}), Settings(AUTH_MODE="bearer")) is None


class TestCrypto:

    def test_encrypt_decrypt(self):
        encrypted = encrypt_value('{"project_id": "gameDB"}')

        assert "gameDB" not in encrypted
        assert decrypt_value(encrypted) == '{"project_id": "gameDB"}'

    def test_empty_values(self):
        assert encrypt_value("") == ""
        assert decrypt_value("") is None

    @pytest.mark.parametrize("blob", ["not-base64!!", "Z2FyYmFnZQ=="])
    def test_unreadable_blob(self, blob):
        assert decrypt_value(blob) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
