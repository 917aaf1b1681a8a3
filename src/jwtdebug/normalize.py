"""Token candidate extraction.

Tokens are pasted from all sorts of places: ``Authorization`` headers, cookies,
JSON responses, log lines. Smart mode pulls out the first JWT-shaped run of
characters and ignores whatever surrounds it.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Header and payload are base64url JSON objects, so both start with the
# encoding of '{"' ("eyJ"). The signature is any non-empty base64url run.
_JWT_SHAPE_RE = re.compile(r"eyJ[A-Za-z0-9_-]*\.eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+")


def normalize_token(value: str, strict: bool = False) -> str:
    """Return the token to parse from a raw input string.

    Args:
        value: Raw input (argument or stdin line)
        strict: Disable extraction and only trim whitespace

    Returns:
        The first JWT-shaped substring in smart mode, otherwise the trimmed input
    """
    value = value.strip()
    if not value or strict:
        return value

    match = _JWT_SHAPE_RE.search(value)
    if match is None:
        logger.debug("No JWT-shaped substring found, passing input through")
        return value

    if match.start() > 0 or match.end() < len(value):
        logger.debug(
            f"Extracted token from surrounding text "
            f"(dropped {match.start()} leading, {len(value) - match.end()} trailing chars)"
        )
    return match.group(0)
