"""Unit tests for TokenIssuer.

Tests JWT access token creation/verification and refresh token generation.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from inventory_api.services.errors import InvalidAccessToken

# Must match the token_settings fixture in conftest.py
SIGNING_KEY = "unit-test-signing-key-0123456789abcdef"
ISSUER = "inventory-api-test"
AUDIENCE = "inventory-clients-test"


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


# ---------------------------------------------------------------------------
# Access tokens
# ---------------------------------------------------------------------------

class TestIssueAccessToken:
    """Tests for issue_access_token."""

    def test_claims(self, issuer):
        user_id = uuid4()
        now = _now()
        token = issuer.issue_access_token(user_id, "a@x.com", now)

        payload = jwt.decode(
            token, SIGNING_KEY, algorithms=["HS256"], audience=AUDIENCE, issuer=ISSUER
        )
        assert payload["sub"] == str(user_id)
        assert payload["email"] == "a@x.com"
        assert payload["iss"] == ISSUER
        assert payload["aud"] == AUDIENCE
        assert payload["iat"] == int(now.timestamp())
        assert payload["exp"] - payload["iat"] == 15 * 60

    def test_deterministic_for_same_inputs(self, issuer):
        user_id = uuid4()
        now = _now()
        assert issuer.issue_access_token(user_id, "a@x.com", now) == issuer.issue_access_token(
            user_id, "a@x.com", now
        )

    def test_differs_when_time_differs(self, issuer):
        user_id = uuid4()
        now = _now()
        t1 = issuer.issue_access_token(user_id, "a@x.com", now)
        t2 = issuer.issue_access_token(user_id, "a@x.com", now + timedelta(seconds=1))
        assert t1 != t2

    def test_signed_with_configured_key_only(self, issuer):
        token = issuer.issue_access_token(uuid4(), "a@x.com", _now())
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(
                token, "some-other-key-with-enough-length-000", algorithms=["HS256"],
                audience=AUDIENCE,
            )


class TestDecodeAccessToken:
    """Tests for decode_access_token."""

    def test_round_trip(self, issuer):
        user_id = uuid4()
        token = issuer.issue_access_token(user_id, "bob@x.com", _now())
        claims = issuer.decode_access_token(token)
        assert claims.sub == user_id
        assert claims.email == "bob@x.com"

    def test_expired_beyond_leeway_raises(self, issuer):
        issued = _now() - timedelta(minutes=15) - timedelta(minutes=10)
        token = issuer.issue_access_token(uuid4(), "a@x.com", issued)
        with pytest.raises(InvalidAccessToken, match="expired"):
            issuer.decode_access_token(token)

    def test_expired_within_clock_skew_accepted(self, issuer):
        issued = _now() - timedelta(minutes=15) - timedelta(minutes=2)
        token = issuer.issue_access_token(uuid4(), "a@x.com", issued)
        assert issuer.decode_access_token(token).email == "a@x.com"

    def test_wrong_audience_raises(self, issuer):
        now = _now()
        token = jwt.encode(
            {"sub": str(uuid4()), "email": "a@x.com", "iss": ISSUER, "aud": "someone-else",
             "iat": now, "exp": now + timedelta(minutes=5)},
            SIGNING_KEY, algorithm="HS256",
        )
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token(token)

    def test_wrong_issuer_raises(self, issuer):
        now = _now()
        token = jwt.encode(
            {"sub": str(uuid4()), "email": "a@x.com", "iss": "evil", "aud": AUDIENCE,
             "iat": now, "exp": now + timedelta(minutes=5)},
            SIGNING_KEY, algorithm="HS256",
        )
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token(token)

    def test_tampered_signature_raises(self, issuer):
        now = _now()
        token = jwt.encode(
            {"sub": str(uuid4()), "email": "a@x.com", "iss": ISSUER, "aud": AUDIENCE,
             "iat": now, "exp": now + timedelta(minutes=5)},
            "wrong-secret-but-long-enough-for-hs256!", algorithm="HS256",
        )
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token(token)

    def test_missing_email_claim_raises(self, issuer):
        now = _now()
        token = jwt.encode(
            {"sub": str(uuid4()), "iss": ISSUER, "aud": AUDIENCE,
             "iat": now, "exp": now + timedelta(minutes=5)},
            SIGNING_KEY, algorithm="HS256",
        )
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token(token)

    def test_non_uuid_subject_raises(self, issuer):
        now = _now()
        token = jwt.encode(
            {"sub": "not-a-uuid", "email": "a@x.com", "iss": ISSUER, "aud": AUDIENCE,
             "iat": now, "exp": now + timedelta(minutes=5)},
            SIGNING_KEY, algorithm="HS256",
        )
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token(token)

    def test_garbage_string_raises(self, issuer):
        with pytest.raises(InvalidAccessToken):
            issuer.decode_access_token("not.a.jwt")


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------

class TestIssueRefreshToken:
    """Tests for issue_refresh_token and fingerprint."""

    def test_expiry_is_now_plus_ttl(self, issuer):
        now = _now()
        _, expiry = issuer.issue_refresh_token(now)
        assert expiry == now + timedelta(days=7)

    def test_token_has_512_bits_by_default(self, issuer):
        token, _ = issuer.issue_refresh_token(_now())
        # 64 random bytes -> 86 url-safe base64 chars without padding
        assert len(token) == 86

    def test_each_call_unique(self, issuer):
        now = _now()
        tokens = {issuer.issue_refresh_token(now)[0] for _ in range(50)}
        assert len(tokens) == 50

    def test_fingerprint_is_sha256(self, issuer):
        token, _ = issuer.issue_refresh_token(_now())
        assert issuer.fingerprint(token) == hashlib.sha256(token.encode("utf-8")).hexdigest()
        assert issuer.fingerprint(token) != token
