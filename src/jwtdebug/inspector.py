"""Per-token pipeline: parse, classify, check expiration, optionally verify."""

import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from .claims import classify_claims
from .constants import ExitCode
from .errors import ConfigError, KeyFileError, VerificationError
from .expiration import check_expiration
from .models import (
    Options,
    SignatureInfo,
    TokenReport,
    VerificationOutcome,
    VerificationStatus,
)
from .parser import parse_token
from .verification import verify_token_signature

logger = logging.getLogger(__name__)


def decode_signature(signature_part: str) -> SignatureInfo:
    """Decode the base64url signature segment to hex."""
    try:
        padded = signature_part + "=" * (-len(signature_part) % 4)
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        return SignatureInfo(raw=signature_part, decode_error=f"Error decoding: {e}")
    return SignatureInfo(raw=signature_part, decoded_hex=raw.hex())


def verify(token_string: str, options: Options) -> VerificationOutcome:
    """Run the verifier and turn its result into a presentable outcome.

    Raw-claims output prints nothing but the claims, so verification is
    not attempted there.
    """
    if not options.verify or options.raw_claims:
        return VerificationOutcome()

    try:
        verify_token_signature(token_string, options.key_file, options.ignore_expiration)
    except (ConfigError, KeyFileError) as e:
        logger.debug(f"Key material unusable: {e}")
        return VerificationOutcome(
            status=VerificationStatus.FAILED,
            reason=str(e),
            exit_code=ExitCode.CONFIG_ERROR,
        )
    except VerificationError as e:
        return VerificationOutcome(
            status=VerificationStatus.FAILED,
            reason=str(e),
            causes=e.causes,
            exit_code=ExitCode.VERIFICATION_FAILED,
        )
    return VerificationOutcome(status=VerificationStatus.VERIFIED)


def inspect_token(token_string: str, options: Options, now: Optional[datetime] = None) -> TokenReport:
    """Build the full report for one normalized token.

    Raises:
        TokenFormatError: If the token cannot be decoded
    """
    token = parse_token(token_string)

    if options.decode_signature:
        signature = decode_signature(token.signature_part)
    else:
        signature = SignatureInfo(raw=token.signature_part)

    return TokenReport(
        token=token,
        claims=classify_claims(token.claims),
        signature=signature,
        expiration=check_expiration(token.claims, now) if options.show_expiration else [],
        verification=verify(token_string, options),
    )
