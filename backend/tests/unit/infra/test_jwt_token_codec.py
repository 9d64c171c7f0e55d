"""Unit tests for the PyJWT-backed token codec."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from tasktracker.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from tasktracker.services._shared.clock import now_utc
from tasktracker.services._shared.ports import TokenClass

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"


@pytest.fixture()
def codec() -> JWTTokenCodec:
    return JWTTokenCodec(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=900,
        refresh_ttl=7 * 86400,
    )


def test_access_token_round_trip(codec):
    issued = codec.issue_short_lived(42)

    assert codec.verify(issued.token, TokenClass.ACCESS) == 42
    assert issued.expires_in == 900


def test_refresh_token_round_trip(codec):
    issued = codec.issue_long_lived(42)

    assert codec.verify(issued.token, TokenClass.REFRESH) == 42
    assert issued.expires_in == 7 * 86400


def test_token_classes_are_not_interchangeable(codec):
    access = codec.issue_short_lived(1).token
    refresh = codec.issue_long_lived(1).token

    assert codec.verify(access, TokenClass.REFRESH) is None
    assert codec.verify(refresh, TokenClass.ACCESS) is None


def test_type_claim_is_checked_even_with_the_right_key(codec):
    forged = jwt.encode(
        {"sub": "1", "iat": now_utc(), "exp": now_utc() + timedelta(minutes=5),
         "type": "refresh", "jti": "x"},
        ACCESS_SECRET,
        algorithm="HS256",
    )

    assert codec.verify(forged, TokenClass.ACCESS) is None


def test_expired_token_is_rejected():
    stale = JWTTokenCodec(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=60,
        clock=lambda: now_utc() - timedelta(hours=2),
    )
    token = stale.issue_short_lived(5).token

    assert stale.verify(token, TokenClass.ACCESS) is None


def test_expiry_follows_wall_clock(codec):
    with freeze_time("2026-03-01 12:00:00"):
        token = codec.issue_short_lived(9).token
        assert codec.verify(token, TokenClass.ACCESS) == 9

    with freeze_time("2026-03-01 12:16:00"):
        assert codec.verify(token, TokenClass.ACCESS) is None


def test_token_signed_with_other_keys_is_rejected(codec):
    other = JWTTokenCodec(access_secret="a" * 40, refresh_secret="b" * 40)
    token = other.issue_short_lived(3).token

    assert codec.verify(token, TokenClass.ACCESS) is None


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", None, 123])
def test_verify_never_raises(codec, garbage):
    assert codec.verify(garbage, TokenClass.ACCESS) is None


def test_missing_claims_are_rejected(codec):
    token = jwt.encode({"sub": "1"}, ACCESS_SECRET, algorithm="HS256")

    assert codec.verify(token, TokenClass.ACCESS) is None


def test_tokens_minted_in_the_same_second_differ(codec):
    with freeze_time("2026-03-01 12:00:00"):
        first = codec.issue_long_lived(1).token
        second = codec.issue_long_lived(1).token

    assert first != second


def test_expires_at_matches_ttl(codec):
    with freeze_time("2026-03-01 12:00:00"):
        issued = codec.issue_short_lived(1)
        assert issued.expires_at - now_utc() == timedelta(seconds=900)


@pytest.mark.parametrize(
    ("access", "refresh"), [("same-secret", "same-secret"), ("", "x" * 32), ("x" * 32, "")]
)
def test_secrets_must_be_present_and_distinct(access, refresh):
    with pytest.raises(ValueError):
        JWTTokenCodec(access_secret=access, refresh_secret=refresh)
