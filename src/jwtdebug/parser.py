"""Unverified decoding of a token into header, claims and signature."""

import logging

import jwt

from .errors import TokenFormatError
from .models import Token
from .sanitize import token_snippet

logger = logging.getLogger(__name__)


def parse_token(token_string: str) -> Token:
    """Split and decode a token without checking its signature.

    Args:
        token_string: Normalized token (header.payload.signature)

    Returns:
        Decoded token

    Raises:
        TokenFormatError: If the token is not three non-empty segments or a
            segment is not base64url-encoded JSON
    """
    parts = token_string.split(".")
    if len(parts) != 3:
        raise TokenFormatError(
            f"invalid token format: expected 3 parts separated by '.', "
            f"got {len(parts)} (token: {token_snippet(token_string)})"
        )
    empty = [name for name, part in zip(("header", "payload", "signature"), parts) if not part]
    if empty:
        raise TokenFormatError(
            f"invalid token format: empty {', '.join(empty)} segment "
            f"(token: {token_snippet(token_string)})"
        )

    try:
        header = jwt.get_unverified_header(token_string)
        claims = jwt.decode(token_string, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise TokenFormatError(
            f"failed to parse token ({token_snippet(token_string)}): {e}"
        ) from e

    logger.debug(
        f"Decoded token: alg={header.get('alg')!r}, {len(header)} header fields, {len(claims)} claims"
    )
    return Token(raw=token_string, header=header, claims=claims, signature_part=parts[2])
