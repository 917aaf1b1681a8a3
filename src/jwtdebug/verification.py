"""Signature verification with an explicit "ignore expiration" policy.

The declared algorithm picks how the key file is interpreted. PyJWT does the
actual cryptography; this module collects every failure it reports (signature
and each time claim separately) into one exception structure and classifies
each leaf. Ignoring expiration is a decision made on that classification, not
a switch that turns time validation off, so a forged token that also happens
to be expired is still rejected.
"""

import logging
from enum import Enum
from typing import Any, List, Mapping

import jwt
from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from .errors import (
    TIME_CAUSES,
    ConfigError,
    FailureCause,
    InvalidKeyError,
    KeyFileError,
    MalformedClaimsError,
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
    TokenNotYetValidError,
    UnsupportedAlgorithmError,
    VerificationError,
)
from .files import read_bounded_file

logger = logging.getLogger(__name__)


class KeyFamily(str, Enum):
    """How key material is interpreted for an algorithm."""

    HMAC = "hmac"
    RSA = "rsa"
    EC = "ec"
    ED25519 = "ed25519"


SUPPORTED_ALGORITHMS: Mapping[str, KeyFamily] = {
    "HS256": KeyFamily.HMAC,
    "HS384": KeyFamily.HMAC,
    "HS512": KeyFamily.HMAC,
    "RS256": KeyFamily.RSA,
    "RS384": KeyFamily.RSA,
    "RS512": KeyFamily.RSA,
    "PS256": KeyFamily.RSA,
    "PS384": KeyFamily.RSA,
    "PS512": KeyFamily.RSA,
    "ES256": KeyFamily.EC,
    "ES384": KeyFamily.EC,
    "ES512": KeyFamily.EC,
    "EdDSA": KeyFamily.ED25519,
}

_PUBLIC_KEY_TYPES = {
    KeyFamily.RSA: (rsa.RSAPublicKey, "an RSA"),
    KeyFamily.EC: (ec.EllipticCurvePublicKey, "an elliptic-curve"),
    KeyFamily.ED25519: (ed25519.Ed25519PublicKey, "an Ed25519"),
}

# Claim checks are run one at a time so co-occurring faults are all reported
_TIME_CLAIM_OPTIONS = ("verify_exp", "verify_nbf")

_SIGNATURE_ONLY_OPTIONS = {
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}

ALLOWED_WHEN_IGNORING_EXPIRATION = TIME_CAUSES | {FailureCause.INVALID_CLAIMS}

# First matching cause decides which exception type the caller sees
_ERROR_PRIORITY = (
    (FailureCause.UNSUPPORTED_ALGORITHM, UnsupportedAlgorithmError),
    (FailureCause.INVALID_KEY, InvalidKeyError),
    (FailureCause.MALFORMED_TOKEN, MalformedTokenError),
    (FailureCause.SIGNATURE_INVALID, SignatureInvalidError),
    (FailureCause.MALFORMED_CLAIMS, MalformedClaimsError),
    (FailureCause.EXPIRED, TokenExpiredError),
    (FailureCause.NOT_YET_VALID, TokenNotYetValidError),
)


class InvalidClaimsGroup(ExceptionGroup):
    """Claim validation failures collected from one token."""


class MalformedClaimError(jwt.InvalidTokenError):
    """A time claim is present but not a number."""


def read_key_file(key_file: str) -> bytes:
    """Read key material, refusing anything but a small regular file."""
    if not key_file:
        raise ConfigError("key file not provided (--key-file required)")
    return read_bounded_file(key_file, label="key file", error=KeyFileError)


def _load_public_key(key_data: bytes) -> Any:
    try:
        return load_pem_public_key(key_data)
    except (ValueError, UnsupportedAlgorithm):
        pass
    try:
        return x509.load_pem_x509_certificate(key_data).public_key()
    except (ValueError, UnsupportedAlgorithm) as e:
        raise InvalidKeyError(
            "key file is not a PEM-encoded public key or certificate",
            [FailureCause.INVALID_KEY],
        ) from e


def load_verification_key(algorithm: str, key_data: bytes) -> Any:
    """Interpret key material for a supported algorithm.

    HMAC algorithms use the file bytes as the secret. Every other family
    expects a PEM public key (or certificate) of the matching type.

    Raises:
        InvalidKeyError: If the key cannot be loaded or has the wrong type
    """
    family = SUPPORTED_ALGORITHMS[algorithm]
    if family is KeyFamily.HMAC:
        return key_data

    public_key = _load_public_key(key_data)
    expected_type, description = _PUBLIC_KEY_TYPES[family]
    if not isinstance(public_key, expected_type):
        raise InvalidKeyError(
            f"{algorithm} requires {description} public key, got {type(public_key).__name__}",
            [FailureCause.INVALID_KEY],
        )
    return public_key


def declared_algorithm(token_string: str) -> str:
    """Return the ``alg`` header if it is on the allow-list.

    Raises:
        MalformedTokenError: If the header cannot be decoded
        UnsupportedAlgorithmError: If ``alg`` is missing or not allowed
    """
    try:
        header = jwt.get_unverified_header(token_string)
    except jwt.PyJWTError as e:
        raise MalformedTokenError(
            f"cannot read token header: {e}", [FailureCause.MALFORMED_TOKEN]
        ) from e

    algorithm = header.get("alg")
    if not isinstance(algorithm, str) or algorithm not in SUPPORTED_ALGORITHMS:
        raise UnsupportedAlgorithmError(
            f"unexpected signing method: {algorithm!r}",
            [FailureCause.UNSUPPORTED_ALGORITHM],
        )
    return algorithm


def _check_signature(token_string: str, key: Any, algorithm: str) -> List[Exception]:
    try:
        jwt.decode(token_string, key=key, algorithms=[algorithm], options=_SIGNATURE_ONLY_OPTIONS)
    except jwt.PyJWTError as e:
        return [e]
    return []


def _check_time_claims(token_string: str) -> List[Exception]:
    try:
        jwt.decode(token_string, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        return [e]

    failures: List[Exception] = []
    for option in _TIME_CLAIM_OPTIONS:
        try:
            jwt.decode(token_string, options={"verify_signature": False, option: True})
        except (jwt.ExpiredSignatureError, jwt.ImmatureSignatureError) as e:
            failures.append(e)
        except (jwt.DecodeError, TypeError, ValueError) as e:
            failures.append(MalformedClaimError(str(e)))
        except jwt.PyJWTError as e:
            failures.append(e)
    return failures


def _is_undecodable(error: Exception) -> bool:
    return isinstance(error, jwt.DecodeError) and not isinstance(error, jwt.InvalidSignatureError)


def collect_failures(token_string: str, key: Any, algorithm: str) -> List[Exception]:
    """Run the signature check and each time-claim check, keeping every failure.

    Claim failures are wrapped in one ``InvalidClaimsGroup``.
    """
    failures = _check_signature(token_string, key, algorithm)
    if any(_is_undecodable(error) for error in failures):
        return failures

    claim_failures = _check_time_claims(token_string)
    if claim_failures:
        failures.append(InvalidClaimsGroup("token has invalid claims", claim_failures))
    return failures


def _classify(error: BaseException) -> FailureCause:
    if isinstance(error, VerificationError) and error.causes:
        return error.causes[0]
    if isinstance(error, jwt.ExpiredSignatureError):
        return FailureCause.EXPIRED
    if isinstance(error, jwt.ImmatureSignatureError):
        return FailureCause.NOT_YET_VALID
    if isinstance(error, MalformedClaimError):
        return FailureCause.MALFORMED_CLAIMS
    if isinstance(error, jwt.InvalidSignatureError):
        return FailureCause.SIGNATURE_INVALID
    if isinstance(error, jwt.InvalidAlgorithmError):
        return FailureCause.UNSUPPORTED_ALGORITHM
    if isinstance(error, jwt.InvalidKeyError):
        return FailureCause.INVALID_KEY
    if isinstance(error, jwt.DecodeError):
        return FailureCause.MALFORMED_TOKEN
    return FailureCause.OTHER


def failure_causes(error: BaseException) -> List[FailureCause]:
    """Classify every node of a failure: exception groups fan out, ``__cause__`` chains are followed.

    An ``InvalidClaimsGroup`` contributes INVALID_CLAIMS for itself plus the
    causes of its members; a plain ``ExceptionGroup`` only contributes its members.
    """
    causes: List[FailureCause] = []
    if isinstance(error, BaseExceptionGroup):
        if isinstance(error, InvalidClaimsGroup):
            causes.append(FailureCause.INVALID_CLAIMS)
        for inner in error.exceptions:
            causes.extend(failure_causes(inner))
    else:
        causes.append(_classify(error))

    if error.__cause__ is not None:
        causes.extend(failure_causes(error.__cause__))
    return causes


def only_time_related(causes: List[FailureCause]) -> bool:
    """True when every cause is exp/nbf/claims-wrapper and at least one is exp or nbf."""
    return (
        all(cause in ALLOWED_WHEN_IGNORING_EXPIRATION for cause in causes)
        and any(cause in TIME_CAUSES for cause in causes)
    )


def _leaf_messages(error: BaseException) -> List[str]:
    if isinstance(error, BaseExceptionGroup):
        messages = []
        for inner in error.exceptions:
            messages.extend(_leaf_messages(inner))
        return messages
    return [str(error) or type(error).__name__]


def _combine(failures: List[Exception]) -> Exception:
    if len(failures) == 1:
        return failures[0]
    return ExceptionGroup("token failed validation", failures)


def _to_verification_error(failure: Exception, causes: List[FailureCause]) -> VerificationError:
    message = "; ".join(_leaf_messages(failure))
    for cause, error_class in _ERROR_PRIORITY:
        if cause in causes:
            return error_class(message, causes)
    return VerificationError(message, causes)


def verify_token_signature(token_string: str, key_file: str, ignore_expiration: bool = False) -> None:
    """Verify a token's signature and time claims against a key file.

    Args:
        token_string: The token to verify
        key_file: Path to the HMAC secret or PEM public key
        ignore_expiration: Accept tokens whose only failures are exp/nbf

    Raises:
        ConfigError: If no key file was given
        KeyFileError: If the key file cannot be used
        VerificationError: One of its subclasses, carrying every classified cause
    """
    key_data = read_key_file(key_file)
    algorithm = declared_algorithm(token_string)
    key = load_verification_key(algorithm, key_data)
    logger.debug(f"Verifying {algorithm} token with {SUPPORTED_ALGORITHMS[algorithm].value} key")

    failures = collect_failures(token_string, key, algorithm)
    if not failures:
        logger.debug("Signature and time claims valid")
        return

    failure = _combine(failures)
    causes = failure_causes(failure)
    logger.debug(f"Verification failed with causes: {[cause.value for cause in causes]}")

    if ignore_expiration and only_time_related(causes):
        logger.info(f"Ignoring time-only validation failure: {'; '.join(_leaf_messages(failure))}")
        return

    raise _to_verification_error(failure, causes) from failure
