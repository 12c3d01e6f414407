"""
Tests for JWT issuance and parsing.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from storefront.config import ALGORITHM, ISSUER_NAME, SECRET_KEY
from storefront.exceptions import ClaimsMissing, TokenExpired, TokenInvalid
from storefront.roles import Role
from storefront.tokens import issue_token, parse_token


def _claims(**overrides):
    now = datetime.now(timezone.utc)
    claims = {
        "iss": ISSUER_NAME,
        "iat": now,
        "exp": now + timedelta(minutes=5),
        "sub": "7",
        "role": "customer",
    }
    claims.update(overrides)
    return {key: value for key, value in claims.items() if value is not None}


class TestRoundTrip:

    @pytest.mark.parametrize("role", list(Role))
    def test_parse_recovers_identity(self, role):
        claims = parse_token(issue_token(42, role))
        assert claims.user_id == 42
        assert claims.role == role.value

    def test_claims_carry_issuer_and_lifetime(self):
        claims = parse_token(issue_token(1, Role.ADMIN, expires_delta=timedelta(minutes=30)))
        assert claims.issuer == ISSUER_NAME
        lifetime = claims.expires_at - claims.issued_at
        assert timedelta(minutes=29) <= lifetime <= timedelta(minutes=31)

    def test_issue_rejects_unknown_role(self):
        with pytest.raises(ValueError):
            issue_token(1, "superuser")


class TestParseFailures:

    def test_expired_token(self):
        token = issue_token(1, Role.CUSTOMER, expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpired):
            parse_token(token)

    def test_garbage_token(self):
        with pytest.raises(TokenInvalid):
            parse_token("not-a-token")

    def test_wrong_signing_key(self):
        token = jwt.encode(_claims(), "some-other-key", algorithm=ALGORITHM)
        with pytest.raises(TokenInvalid):
            parse_token(token)

    def test_foreign_algorithm_is_rejected(self):
        token = jwt.encode(_claims(), SECRET_KEY, algorithm="HS512")
        with pytest.raises(TokenInvalid):
            parse_token(token)

    def test_wrong_issuer(self):
        token = jwt.encode(_claims(iss="someone-else"), SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(TokenInvalid):
            parse_token(token)

    def test_missing_exp_is_rejected(self):
        token = jwt.encode(_claims(exp=None), SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(TokenInvalid):
            parse_token(token)

    def test_non_numeric_subject(self):
        token = jwt.encode(_claims(sub="alice"), SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(TokenInvalid):
            parse_token(token)

    @pytest.mark.parametrize("missing", ["sub", "role"])
    def test_missing_identity_claim(self, missing):
        token = jwt.encode(_claims(**{missing: None}), SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(ClaimsMissing):
            parse_token(token)

    def test_non_string_role_claim(self):
        token = jwt.encode(_claims(role=5), SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(ClaimsMissing):
            parse_token(token)
