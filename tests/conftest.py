"""Shared fixtures: keys generated per session, tokens signed with PyJWT."""

import base64
import hashlib
import hmac
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

HMAC_SECRET = b"test-secret-that-is-long-enough-for-hs512-signing-0123456789abcdef"


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_json(obj: Any) -> str:
    return b64url(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def hs256_token(claims: Dict[str, Any], secret: bytes, header: Optional[Dict[str, Any]] = None) -> str:
    """Sign by hand, for headers and secrets PyJWT refuses to produce."""
    header = header or {"alg": "HS256", "typ": "JWT"}
    signing_input = f"{b64url_json(header)}.{b64url_json(claims)}"
    digest = hmac.new(secret, signing_input.encode("ascii"), hashlib.sha256).digest()
    return f"{signing_input}.{b64url(digest)}"


def public_pem(private_key) -> bytes:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ed25519_private_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def write_key(tmp_path: Path) -> Callable[[str, bytes], str]:
    """Write key material to a temp file and return its path."""

    def _write(name: str, data: bytes) -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write


@pytest.fixture
def hmac_key_file(write_key) -> str:
    return write_key("secret.key", HMAC_SECRET)


@pytest.fixture
def rsa_key_file(write_key, rsa_private_key) -> str:
    return write_key("rsa_public.pem", public_pem(rsa_private_key))


@pytest.fixture
def ec_key_file(write_key, ec_private_key) -> str:
    return write_key("ec_public.pem", public_pem(ec_private_key))


@pytest.fixture
def ed25519_key_file(write_key, ed25519_private_key) -> str:
    return write_key("ed25519_public.pem", public_pem(ed25519_private_key))


@pytest.fixture
def now() -> int:
    return int(time.time())


@pytest.fixture
def claims(now) -> Dict[str, Any]:
    return {
        "iss": "https://issuer.example.com",
        "sub": "user-123",
        "aud": "api",
        "exp": now + 3600,
        "iat": now - 60,
        "role": "admin",
    }


@pytest.fixture
def hs256_valid(claims) -> str:
    return jwt.encode(claims, HMAC_SECRET, algorithm="HS256")


@pytest.fixture
def hs256_expired(claims, now) -> str:
    return jwt.encode({**claims, "exp": now - 3600}, HMAC_SECRET, algorithm="HS256")


@pytest.fixture
def hs256_expired_and_future_nbf(claims, now) -> str:
    return jwt.encode(
        {**claims, "exp": now - 3600, "nbf": now + 3600}, HMAC_SECRET, algorithm="HS256"
    )
