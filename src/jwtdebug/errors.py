"""Exception types raised by the token pipeline.

Parsing, key loading and verification failures are all raised as subclasses of
``JWTDebugError`` so the CLI can map them to exit codes in one place.
"""

from enum import Enum
from typing import List, Optional


class FailureCause(str, Enum):
    """Classification of one leaf in a verification failure."""

    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    INVALID_CLAIMS = "invalid_claims"
    MALFORMED_CLAIMS = "malformed_claims"
    MALFORMED_TOKEN = "malformed_token"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    INVALID_KEY = "invalid_key"
    OTHER = "other"


TIME_CAUSES = frozenset({FailureCause.EXPIRED, FailureCause.NOT_YET_VALID})


class JWTDebugError(Exception):
    """Base class for all jwtdebug errors."""


class TokenFormatError(JWTDebugError):
    """Token is not three base64url JSON segments."""


class ConfigError(JWTDebugError):
    """Missing or invalid configuration."""


class KeyFileError(JWTDebugError):
    """Key file cannot be stat'ed, is not a regular file, is too large or unreadable."""


class VerificationError(JWTDebugError):
    """Signature or claim validation failed.

    Attributes:
        causes: Every classified cause found while walking the failure
    """

    def __init__(self, message: str, causes: Optional[List[FailureCause]] = None):
        super().__init__(message)
        self.causes = list(causes or [])


class SignatureInvalidError(VerificationError):
    """Signature does not match the key."""


class TokenExpiredError(VerificationError):
    """Token is past its exp claim."""


class TokenNotYetValidError(VerificationError):
    """Token is before its nbf claim."""


class MalformedClaimsError(VerificationError):
    """A registered claim has the wrong shape (e.g. a non-numeric exp)."""


class MalformedTokenError(VerificationError):
    """Token could not be decoded for verification."""


class UnsupportedAlgorithmError(VerificationError):
    """Declared algorithm is not on the allow-list."""


class InvalidKeyError(VerificationError):
    """Key material does not fit the declared algorithm family."""
