"""jwtdebug - decode, inspect and verify JSON Web Tokens.

This package provides the token pipeline used by the ``jwtdebug`` command:
extraction of tokens from surrounding text, unverified decoding, claim
classification with timestamp detection, and signature verification with an
explicit policy for ignoring expiration.
"""

from .claims import classify_claims
from .errors import JWTDebugError, TokenFormatError, VerificationError
from .inspector import inspect_token
from .models import Options, TokenReport
from .normalize import normalize_token
from .parser import parse_token
from .timestamps import try_parse_timestamp
from .verification import verify_token_signature

__version__ = "0.1.0"
__all__ = [
    "classify_claims",
    "inspect_token",
    "normalize_token",
    "parse_token",
    "try_parse_timestamp",
    "verify_token_signature",
    "JWTDebugError",
    "Options",
    "TokenFormatError",
    "TokenReport",
    "VerificationError",
]
