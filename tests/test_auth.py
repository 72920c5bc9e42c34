"""Tests for credential handling: SendAccessToken, bearer tokens, X-Matrix."""
from __future__ import annotations

import pytest

from mxapi.core.errors import AuthenticationRequired, MissingCredential
from mxapi.core.types import AuthScheme, SendAccessToken
from mxapi.wire.auth import (
    XMatrix,
    authorization_header,
    check_authentication,
    extract_access_token,
    parse_x_matrix,
)

# =========================================================================
# SendAccessToken
# =========================================================================


class TestSendAccessToken:
    """Tests for the credential holder."""

    def test_if_required(self) -> None:
        token = SendAccessToken.if_required("secret")
        assert token.required() == "secret"
        assert token.optional() is None

    def test_always(self) -> None:
        token = SendAccessToken.always("secret")
        assert token.required() == "secret"
        assert token.optional() == "secret"

    def test_none(self) -> None:
        token = SendAccessToken.none()
        assert token.required() is None
        assert token.optional() is None

    def test_empty_string_is_no_token(self) -> None:
        assert SendAccessToken.always("").required() is None

    def test_coerce(self) -> None:
        holder = SendAccessToken.if_required("a")
        assert SendAccessToken.coerce(holder) is holder
        assert SendAccessToken.coerce("b").optional() == "b"
        assert SendAccessToken.coerce(None).required() is None

    def test_token_never_printed(self) -> None:
        token = SendAccessToken.always("syt_secret")
        assert "syt_secret" not in str(token)
        assert "syt_secret" not in repr(token)
        assert "always" in repr(token)


# =========================================================================
# Outgoing
# =========================================================================


class TestAuthorizationHeader:
    """Tests for authorization_header."""

    def test_required(self) -> None:
        header = authorization_header(AuthScheme.ACCESS_TOKEN, SendAccessToken.if_required("t"))
        assert header == "Bearer t"

    def test_required_missing(self) -> None:
        with pytest.raises(MissingCredential) as exc_info:
            authorization_header(AuthScheme.ACCESS_TOKEN, SendAccessToken.none(), endpoint="whoami")
        assert exc_info.value.details == {"endpoint": "whoami"}
        assert exc_info.value.http_status == 401

    def test_optional_not_sent_by_default(self) -> None:
        assert (
            authorization_header(AuthScheme.ACCESS_TOKEN_OPTIONAL, SendAccessToken.if_required("t"))
            is None
        )

    @pytest.mark.parametrize("scheme", [AuthScheme.NONE, AuthScheme.SERVER_SIGNATURES])
    def test_no_bearer_token(self, scheme: AuthScheme) -> None:
        assert authorization_header(scheme, SendAccessToken.always("t")) is None


# =========================================================================
# Incoming
# =========================================================================


class TestExtractAccessToken:
    """Tests for extract_access_token."""

    def test_header(self) -> None:
        assert extract_access_token({"authorization": "Bearer abc"}) == "abc"

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_access_token({"Authorization": "bearer abc"}) == "abc"

    def test_query_parameter(self) -> None:
        assert extract_access_token({}, "format=event&access_token=abc") == "abc"

    def test_header_wins(self) -> None:
        assert extract_access_token({"Authorization": "Bearer h"}, "access_token=q") == "h"

    def test_absent(self) -> None:
        assert extract_access_token({"Authorization": "Basic Zm9v"}) is None
        assert extract_access_token({}, "access_token=") is None


class TestXMatrix:
    """Tests for X-Matrix header parsing."""

    def test_full_header(self) -> None:
        value = parse_x_matrix(
            'X-Matrix origin="origin.example",destination="dest.example",'
            'key="ed25519:key1",sig="ABCDEF"'
        )
        assert value == XMatrix(
            origin="origin.example",
            key="ed25519:key1",
            sig="ABCDEF",
            destination="dest.example",
        )

    def test_unquoted_values_and_spacing(self) -> None:
        value = parse_x_matrix("X-Matrix origin=origin.example, key=ed25519:key1, sig=ABC")
        assert value.origin == "origin.example"
        assert value.key == "ed25519:key1"
        assert value.destination is None

    def test_escaped_quotes(self) -> None:
        value = parse_x_matrix(r'X-Matrix origin="o\"x",key="k",sig="s"')
        assert value.origin == 'o"x'

    def test_missing_signature(self) -> None:
        with pytest.raises(AuthenticationRequired) as exc_info:
            parse_x_matrix('X-Matrix origin="o",key="k"')
        assert exc_info.value.details["missing"] == ["sig"]

    def test_wrong_scheme(self) -> None:
        with pytest.raises(AuthenticationRequired):
            parse_x_matrix("Bearer abc")


class TestCheckAuthentication:
    """Tests for check_authentication."""

    def test_required_token_present(self) -> None:
        assert check_authentication(AuthScheme.ACCESS_TOKEN, {"Authorization": "Bearer t"}) == "t"

    def test_required_token_missing(self) -> None:
        with pytest.raises(AuthenticationRequired):
            check_authentication(AuthScheme.ACCESS_TOKEN, {})

    def test_optional_token(self) -> None:
        assert check_authentication(AuthScheme.ACCESS_TOKEN_OPTIONAL, {}) is None
        assert check_authentication(AuthScheme.ACCESS_TOKEN_OPTIONAL, {}, "access_token=q") == "q"

    def test_no_authentication(self) -> None:
        assert check_authentication(AuthScheme.NONE, {}) is None

    def test_server_signatures(self) -> None:
        headers = {"Authorization": 'X-Matrix origin="o",key="ed25519:1",sig="s"'}
        value = check_authentication(AuthScheme.SERVER_SIGNATURES, headers)
        assert isinstance(value, XMatrix)
        assert value.origin == "o"

    def test_server_signatures_missing(self) -> None:
        with pytest.raises(AuthenticationRequired):
            check_authentication(AuthScheme.SERVER_SIGNATURES, {"Authorization": "Bearer t"})
        with pytest.raises(AuthenticationRequired):
            check_authentication(AuthScheme.SERVER_SIGNATURES, {})
