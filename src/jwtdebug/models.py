"""Data models for jwtdebug."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .constants import ExitCode
from .errors import FailureCause

OutputFormat = Literal["pretty", "json", "raw"]


class Options(BaseModel):
    """Runtime switches for processing one batch of tokens."""

    strict: bool = Field(False, description="Disable smart token extraction")
    show_header: bool = Field(False, description="Show the token header")
    show_claims: bool = Field(True, description="Show the token claims")
    show_signature: bool = Field(False, description="Show the signature segment")
    show_expiration: bool = Field(False, description="Report exp/nbf/iat status")
    decode_signature: bool = Field(False, description="Also render the signature as hex")
    raw_claims: bool = Field(False, description="Print only the claims JSON")
    verify: bool = Field(False, description="Verify the signature")
    key_file: str = Field("", description="Key file for verification")
    ignore_expiration: bool = Field(False, description="Accept tokens whose only faults are exp/nbf")
    output_format: OutputFormat = Field("pretty", description="pretty, json or raw")
    color: bool = Field(True, description="Colorize terminal output")
    quiet: bool = Field(False, description="Suppress informational notices")
    verbose: bool = Field(False, description="Debug logging on stderr")


class Token(BaseModel):
    """A decoded, unverified JWT."""

    raw: str
    header: Dict[str, Any]
    claims: Dict[str, Any]
    signature_part: str


class ClaimEntry(BaseModel):
    """One claim prepared for display."""

    key: str
    label: str = Field(..., description="Human label for standard claims, the key otherwise")
    value: Any = None
    timestamp: Optional[datetime] = Field(None, description="Set when the value reads as a time")


class ClassifiedClaims(BaseModel):
    """Claims split into registered (fixed order) and custom (sorted) entries."""

    standard: List[ClaimEntry] = Field(default_factory=list)
    custom: List[ClaimEntry] = Field(default_factory=list)


class SignatureInfo(BaseModel):
    """The signature segment, optionally decoded to hex."""

    raw: str
    decoded_hex: Optional[str] = None
    decode_error: Optional[str] = None


class ExpirationStatus(str, Enum):
    """Outcome of a single time-claim check."""

    EXPIRED = "expired"
    VALID = "valid"
    NOT_YET_VALID = "not_yet_valid"
    ACTIVE = "active"
    ISSUED = "issued"
    MISSING = "missing"
    UNKNOWN_TYPE = "unknown_type"


class ExpirationCheck(BaseModel):
    """Status of one of exp, nbf or iat relative to now."""

    claim: str
    status: ExpirationStatus
    at: Optional[datetime] = None
    delta_seconds: Optional[int] = Field(None, description="Claim time minus now")
    value_type: Optional[str] = Field(None, description="JSON type name for UNKNOWN_TYPE")


class VerificationStatus(str, Enum):
    """Tri-state verification verdict."""

    VERIFIED = "verified"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


class VerificationOutcome(BaseModel):
    """Verdict of the signature verifier for one token."""

    status: VerificationStatus = VerificationStatus.NOT_ATTEMPTED
    reason: Optional[str] = None
    causes: List[FailureCause] = Field(default_factory=list)
    exit_code: ExitCode = ExitCode.SUCCESS


class TokenReport(BaseModel):
    """Everything the presentation layer needs to render one token."""

    token: Token
    claims: ClassifiedClaims
    signature: SignatureInfo
    expiration: List[ExpirationCheck] = Field(default_factory=list)
    verification: VerificationOutcome = Field(default_factory=VerificationOutcome)

    @property
    def header_entries(self) -> List[tuple]:
        """Header items sorted by key, for aligned pretty output."""
        return sorted(self.token.header.items())

    @property
    def exit_code(self) -> ExitCode:
        return self.verification.exit_code
