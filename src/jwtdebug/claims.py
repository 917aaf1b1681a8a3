"""Partitioning of claims into registered and custom sections."""

from typing import Any, Dict, Mapping

from .models import ClaimEntry, ClassifiedClaims
from .timestamps import try_parse_timestamp

# Registered claim names (RFC 7519 section 4.1), in display order
STANDARD_CLAIMS: Mapping[str, str] = {
    "iss": "Issuer",
    "sub": "Subject",
    "aud": "Audience",
    "exp": "Expiration",
    "nbf": "Not Before",
    "iat": "Issued At",
    "jti": "JWT ID",
}
STANDARD_ORDER = tuple(STANDARD_CLAIMS)

TIME_CLAIMS = frozenset({"exp", "nbf", "iat"})


def classify_claims(claims: Dict[str, Any]) -> ClassifiedClaims:
    """Split claims into standard entries (catalog order) and custom entries (sorted).

    Time claims and every custom claim are run through the timestamp
    classifier; a hit is attached to the entry for dual rendering. No
    validation happens here, so empty input gives empty sections.
    """
    standard = []
    for key in STANDARD_ORDER:
        if key not in claims:
            continue
        value = claims[key]
        timestamp = try_parse_timestamp(value) if key in TIME_CLAIMS else None
        standard.append(
            ClaimEntry(key=key, label=STANDARD_CLAIMS[key], value=value, timestamp=timestamp)
        )

    custom = [
        ClaimEntry(key=key, label=key, value=claims[key], timestamp=try_parse_timestamp(claims[key]))
        for key in sorted(claims)
        if key not in STANDARD_CLAIMS
    ]

    return ClassifiedClaims(standard=standard, custom=custom)
