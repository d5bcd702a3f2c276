"""
Tests for the Ed25519 JWT claims codec.
"""

import base64
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wasmseal.claims.models import Claims, ModuleMetadata
from wasmseal.constants import Revisions
from wasmseal.crypto.jwt_codec import JwtClaimsCodec
from wasmseal.errors import InvalidTokenError, SigningError

from module_factory import signed_token


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def unb64url(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4))


@pytest.fixture
def claims(account_key, module_key) -> Claims:
    return Claims(
        issuer=account_key.public_key(),
        subject=module_key.public_key(),
        id="claim-1",
        issued_at=1700000000,
        expires=1800000000,
        metadata=ModuleMetadata(
            name="echo",
            module_hash="AB" * 32,
            caps=["messaging"],
            tags=["demo"],
            rev=2,
            ver="0.2.0",
        ),
    )


class TestEncode:
    """Tests for token encoding."""

    def test_three_segments(self, codec, claims, account_key):
        token = codec.encode(claims, account_key)
        assert token.count('.') == 2
        assert '=' not in token

    def test_header(self, codec, claims, account_key):
        header = json.loads(unb64url(codec.encode(claims, account_key).split('.')[0]))
        assert header == {'alg': 'Ed25519', 'typ': 'jwt'}

    def test_payload_keys(self, codec, claims, account_key):
        payload = json.loads(unb64url(codec.encode(claims, account_key).split('.')[1]))
        assert payload['iss'] == account_key.public_key()
        assert payload['jti'] == "claim-1"
        assert payload['wascap']['hash'] == "AB" * 32
        assert payload['wascap']['caps'] == ["messaging"]
        assert payload['wascap_revision'] == Revisions.CURRENT
        assert 'nbf' not in payload

    def test_deterministic(self, codec, claims, account_key):
        assert codec.encode(claims, account_key) == codec.encode(claims, account_key)

    def test_issuer_must_match_key(self, codec, claims, module_key):
        with pytest.raises(SigningError):
            codec.encode(claims, module_key)

    def test_signer_failure_wrapped(self, codec, claims, failing_key):
        claims.issuer = failing_key.public_key()
        with pytest.raises(SigningError):
            codec.encode(claims, failing_key)


class TestDecode:
    """Tests for token decoding and verification."""

    def test_round_trip(self, codec, claims, account_key):
        decoded = codec.decode(codec.encode(claims, account_key))
        assert decoded == claims

    def test_surrounding_whitespace_ignored(self, codec, claims, account_key):
        assert codec.decode(codec.encode(claims, account_key) + "\n") == claims

    def test_tampered_payload_rejected(self, codec, claims, account_key):
        header, _, signature = codec.encode(claims, account_key).split('.')
        forged = dict(claims.to_dict())
        forged['wascap'] = dict(forged['wascap'], caps=["messaging", "admin"])
        payload = b64url(json.dumps(forged).encode())
        token = f"{header}.{payload}.{signature}"

        with pytest.raises(InvalidTokenError):
            codec.decode(token)
        decoded, valid = codec.decode_unverified(token)
        assert not valid
        assert decoded.metadata.caps == ["messaging", "admin"]

    def test_signature_from_other_key_rejected(self, codec, claims, module_key):
        """Claims naming the account as issuer but signed by the module key."""
        header = b64url(b'{"alg":"Ed25519","typ":"jwt"}')
        payload = b64url(json.dumps(claims.to_dict()).encode())
        signature = b64url(module_key.sign(f"{header}.{payload}".encode()))
        with pytest.raises(InvalidTokenError):
            codec.decode(f"{header}.{payload}.{signature}")

    @pytest.mark.parametrize("token", [
        "",
        "only.two",
        "a.b.c.d",
        "!!!.???.###",
    ])
    def test_structurally_invalid(self, codec, token):
        with pytest.raises(InvalidTokenError):
            codec.decode(token)

    def test_wrong_algorithm(self, codec, claims, account_key):
        header = b64url(json.dumps({'alg': 'HS256', 'typ': 'jwt'}).encode())
        payload = b64url(json.dumps(claims.to_dict()).encode())
        signature = b64url(account_key.sign(f"{header}.{payload}".encode()))
        with pytest.raises(InvalidTokenError):
            codec.decode(f"{header}.{payload}.{signature}")

    def test_payload_not_object(self, codec):
        header = b64url(b'{"alg":"Ed25519","typ":"jwt"}')
        with pytest.raises(InvalidTokenError):
            codec.decode(f"{header}.{b64url(b'[1, 2]')}.{b64url(b'sig')}")

    def test_payload_missing_issuer(self, codec):
        header = b64url(b'{"alg":"Ed25519","typ":"jwt"}')
        payload = b64url(b'{"sub": "abc"}')
        with pytest.raises(InvalidTokenError):
            codec.decode(f"{header}.{payload}.{b64url(b'sig')}")

    @pytest.mark.parametrize("key,value", [('exp', "1800000000"), ('wascap_revision', "5")])
    def test_mistyped_claim_rejected(self, codec, claims, account_key, key, value):
        payload = claims.to_dict()
        payload[key] = value
        with pytest.raises(InvalidTokenError, match=key):
            codec.decode(signed_token(payload, account_key))


class TestMinRevision:
    """Tests for the hash-verification threshold."""

    def test_default(self):
        assert JwtClaimsCodec().min_revision == Revisions.MIN_HASH_VERIFIED

    def test_override(self):
        assert JwtClaimsCodec(min_revision=1).min_revision == 1
        assert JwtClaimsCodec(min_revision=0).min_revision == 0
