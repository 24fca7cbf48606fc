"""Unit tests for auth/tokens.py -- TokenIssuer.

Covers:
- issue/verify round trip and claim shape (sub, iat, optional exp)
- tamper sensitivity: any flipped byte of the payload or signature is InvalidToken
- textual edits that decode to the same bytes are still InvalidToken
- wrong secret, alg=none, malformed strings, ill-typed claims
- expiry raises ExpiredToken
"""

from __future__ import annotations

import json
import time

import pytest
from jose import jwt
from jose.utils import base64url_decode, base64url_encode

from auth.exceptions import ExpiredToken, InvalidToken
from auth.tokens import TokenIssuer
from conftest import TEST_SECRET, make_settings


def _segments(token: str) -> list[bytes]:
    return [base64url_decode(s.encode()) for s in token.split(".")]


def _join(segments: list[bytes]) -> str:
    return ".".join(base64url_encode(s).decode() for s in segments)


def _flip(data: bytes, index: int) -> bytes:
    return data[:index] + bytes([data[index] ^ 0x01]) + data[index + 1 :]


class TestRoundTrip:
    @pytest.mark.parametrize("subject", ["alice", "bob", "Alice", "user.with-dots_1", "名前"])
    def test_subject_survives(self, issuer, subject):
        assert issuer.verify(issuer.issue(subject)).subject == subject

    def test_claims_include_iat_and_exp(self, issuer, settings):
        before = int(time.time())
        claims = issuer.verify(issuer.issue("alice"))
        assert before <= claims.issued_at <= int(time.time())
        assert claims.expires_at == claims.issued_at + settings.token_expire_seconds

    def test_expiry_disabled_omits_exp(self):
        issuer = TokenIssuer(make_settings(token_expire_seconds=0))
        token = issuer.issue("alice")
        assert "exp" not in jwt.get_unverified_claims(token)
        assert issuer.verify(token).expires_at is None

    def test_per_token_expiry_override(self, issuer):
        claims = issuer.verify(issuer.issue("alice", expire_seconds=30))
        assert claims.expires_at == claims.issued_at + 30

    def test_verify_is_repeatable(self, issuer):
        token = issuer.issue("alice")
        assert issuer.verify(token) == issuer.verify(token)


class TestTamper:
    def test_every_payload_byte(self, issuer):
        header, payload, signature = _segments(issuer.issue("alice"))
        for i in range(len(payload)):
            with pytest.raises(InvalidToken):
                issuer.verify(_join([header, _flip(payload, i), signature]))

    def test_every_signature_byte(self, issuer):
        header, payload, signature = _segments(issuer.issue("alice"))
        for i in range(len(signature)):
            with pytest.raises(InvalidToken):
                issuer.verify(_join([header, payload, _flip(signature, i)]))

    def test_swapped_subject_with_original_signature(self, issuer):
        header, payload, signature = _segments(issuer.issue("alice"))
        forged = json.dumps({**json.loads(payload), "sub": "bob"}).encode()
        with pytest.raises(InvalidToken):
            issuer.verify(_join([header, forged, signature]))

    def test_non_canonical_last_character(self, issuer):
        token = issuer.issue("alice")
        replacement = "A" if token[-1] != "A" else "B"
        with pytest.raises(InvalidToken):
            issuer.verify(token[:-1] + replacement)

    def test_appended_character(self, issuer):
        with pytest.raises(InvalidToken):
            issuer.verify(issuer.issue("alice") + "A")


class TestRejections:
    def test_wrong_secret(self, issuer):
        other = TokenIssuer(make_settings(secret_key="another-secret-key-that-is-32-chars-long"))
        with pytest.raises(InvalidToken):
            issuer.verify(other.issue("alice"))

    def test_alg_none(self, issuer):
        header = json.dumps({"alg": "none", "typ": "JWT"}).encode()
        payload = json.dumps({"sub": "alice", "iat": int(time.time())}).encode()
        with pytest.raises(InvalidToken):
            issuer.verify(_join([header, payload, b""]))

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b", "a.b.c", "a.b.c.d", "....", "Bearer x"])
    def test_malformed_strings(self, issuer, garbage):
        with pytest.raises(InvalidToken):
            issuer.verify(garbage)

    @pytest.mark.parametrize(
        "payload",
        [
            {"iat": 1700000000},
            {"sub": "", "iat": 1700000000},
            {"sub": 42, "iat": 1700000000},
            {"sub": "alice"},
            {"sub": "alice", "iat": "yesterday"},
            {"sub": "alice", "iat": True},
        ],
    )
    def test_ill_typed_claims(self, issuer, payload):
        token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            issuer.verify(token)


class TestExpiry:
    def test_expired_token(self, settings):
        # Issued two seconds ago with a one second lifetime.
        past = TokenIssuer(settings, clock=lambda: int(time.time()) - 2)
        token = past.issue("alice", expire_seconds=1)
        with pytest.raises(ExpiredToken):
            TokenIssuer(settings).verify(token)

    def test_not_yet_expired(self, settings):
        past = TokenIssuer(settings, clock=lambda: int(time.time()) - 2)
        token = past.issue("alice", expire_seconds=60)
        assert TokenIssuer(settings).verify(token).subject == "alice"
