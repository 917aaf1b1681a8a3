"""Expiration status of a token's time claims relative to now."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .models import ExpirationCheck, ExpirationStatus
from .timestamps import to_epoch_seconds


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "number"


def _instant(seconds: int) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def check_expiration(claims: Dict[str, Any], now: Optional[datetime] = None) -> List[ExpirationCheck]:
    """Report exp, nbf and iat against the current time.

    A claim with a non-numeric value ends the report with an UNKNOWN_TYPE entry.

    Args:
        claims: Decoded claims
        now: Reference time (defaults to the current UTC time)

    Returns:
        One entry per checked claim, in exp, nbf, iat order
    """
    now_seconds = int((now or datetime.now(timezone.utc)).timestamp())
    checks = []

    if "exp" not in claims:
        checks.append(ExpirationCheck(claim="exp", status=ExpirationStatus.MISSING))

    for claim in ("exp", "nbf", "iat"):
        if claim not in claims:
            continue
        value = claims[claim]
        seconds = to_epoch_seconds(value)
        if seconds is None:
            checks.append(
                ExpirationCheck(
                    claim=claim,
                    status=ExpirationStatus.UNKNOWN_TYPE,
                    value_type=_json_type_name(value),
                )
            )
            break

        delta = seconds - now_seconds
        if claim == "exp":
            status = ExpirationStatus.EXPIRED if delta < 0 else ExpirationStatus.VALID
        elif claim == "nbf":
            status = ExpirationStatus.NOT_YET_VALID if delta > 0 else ExpirationStatus.ACTIVE
        else:
            status = ExpirationStatus.ISSUED

        checks.append(
            ExpirationCheck(claim=claim, status=status, at=_instant(seconds), delta_seconds=delta)
        )

    return checks
