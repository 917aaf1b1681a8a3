"""Terminal and machine-readable rendering of token reports."""

import json
import math
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.text import Text

from .formatter import format_value
from .models import (
    ClaimEntry,
    ExpirationCheck,
    ExpirationStatus,
    Options,
    SignatureInfo,
    TokenReport,
    VerificationOutcome,
    VerificationStatus,
)
from .sanitize import sanitize_string
from .timestamps import format_instant

UNVERIFIED_NOTICE = "Note: claims are unverified. Use --verify --key-file to validate."

SIGNATURE_LABEL_WIDTH = 13  # len("Decoded (hex)")


def make_console(color: bool, stderr: bool = False) -> Console:
    """Console that never wraps, highlights or interprets markup in our output."""
    return Console(
        stderr=stderr,
        color_system="auto" if color else None,
        highlight=False,
        soft_wrap=True,
    )


def _finite(value: Any) -> Any:
    """Replace NaN and infinities (e.g. a claim of 1e400) with their string form."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite(item) for item in value]
    return value


def to_json(data: Any) -> str:
    # ensure_ascii keeps bidi and zero-width characters escaped
    return json.dumps(_finite(data), indent=2, default=str, allow_nan=False)


def _format_raw_value(value: Any) -> str:
    if isinstance(value, dict):
        return f"{{object with {len(value)} keys}}"
    return format_value(value)


def format_raw(data: Dict[str, Any]) -> str:
    """Sorted ``key: value`` lines."""
    return "\n".join(
        f"{sanitize_string(str(key))}: {_format_raw_value(data[key])}" for key in sorted(data)
    )


class Printer:
    """Renders reports according to the output options."""

    def __init__(
        self,
        options: Options,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.options = options
        self.console = console or make_console(options.color)
        self.err_console = err_console or make_console(options.color, stderr=True)

    # Messages

    def error(self, message: str) -> None:
        self.err_console.print(Text(f"Error: {message}", style="red"))

    def notice(self, message: str) -> None:
        if not self.options.quiet:
            self.err_console.print(Text(message, style="yellow"))

    def success(self, message: str) -> None:
        self.console.print(Text(message, style="green"))

    # Reports

    def print_report(self, report: TokenReport) -> None:
        if self.options.raw_claims:
            click.echo(to_json(report.token.claims))
            return

        if not self.options.verify:
            self.notice(UNVERIFIED_NOTICE)

        if self.options.output_format == "json":
            click.echo(to_json(self._structured(report)))
            return

        if self.options.show_header:
            self._section("HEADER:", "bold blue")
            self._print_header(report)
        if self.options.show_claims:
            self._section("CLAIMS:", "bold green")
            self._print_claims(report)
        if self.options.show_signature:
            self._section("SIGNATURE:", "bold yellow")
            self._print_signature(report.signature)
        if self.options.show_expiration:
            self._section("EXPIRATION:", "bold cyan")
            self._print_expiration(report.expiration)
        if self.options.verify:
            self._print_verification(report.verification)

    def _structured(self, report: TokenReport) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.options.show_header:
            data["header"] = report.token.header
        if self.options.show_claims:
            data["claims"] = report.token.claims
        if self.options.show_signature:
            data["signature"] = self._signature_data(report.signature)
        if self.options.show_expiration:
            data["expiration"] = [
                check.model_dump(mode="json", exclude_none=True) for check in report.expiration
            ]
        if self.options.verify:
            data["verification"] = report.verification.model_dump(mode="json", exclude={"exit_code"})
        return data

    def _section(self, title: str, style: str) -> None:
        self.console.print(Text(title, style=style))

    def _key_line(self, indent: int, key: str, width: int, value: Text) -> Text:
        line = Text(" " * indent)
        line.append(key, style="cyan")
        line.append(":" + " " * (width - len(key) + 1))
        line.append_text(value)
        return line

    def _print_header(self, report: TokenReport) -> None:
        if self.options.output_format == "raw":
            self.console.print(Text(format_raw(report.token.header)))
            self.console.print()
            return

        entries = [(sanitize_string(str(key)), value) for key, value in report.header_entries]
        if not entries:
            self.console.print("  No header information available")
        width = max((len(key) for key, _ in entries), default=0)
        for key, value in entries:
            self.console.print(self._key_line(2, key, width, Text(format_value(value))))
        self.console.print()

    def _claim_value(self, entry: ClaimEntry) -> Text:
        text = Text(format_value(entry.value))
        if entry.timestamp is not None:
            text.append(" (")
            text.append(format_instant(entry.timestamp), style="yellow")
            text.append(")")
        return text

    def _print_claims(self, report: TokenReport) -> None:
        if self.options.output_format == "raw":
            self.console.print(Text(format_raw(report.token.claims)))
            self.console.print()
            return

        classified = report.claims
        labels = [entry.label for entry in classified.standard]
        labels += [sanitize_string(entry.key) for entry in classified.custom]
        width = max((len(label) for label in labels), default=0)

        if classified.standard:
            self.console.print(Text("  Standard Claims:", style="bold green"))
            for entry in classified.standard:
                self.console.print(self._key_line(4, entry.label, width, self._claim_value(entry)))

        if classified.custom:
            if classified.standard:
                self.console.print()
            self.console.print(Text("  Custom Claims:", style="bold green"))
            for entry in classified.custom:
                key = sanitize_string(entry.key)
                self.console.print(self._key_line(4, key, width, self._claim_value(entry)))

        self.console.print()

    def _signature_data(self, signature: SignatureInfo) -> Dict[str, str]:
        data = {"raw": signature.raw}
        if signature.decoded_hex is not None:
            data["decoded"] = signature.decoded_hex
        return data

    def _print_signature(self, signature: SignatureInfo) -> None:
        if self.options.output_format == "raw":
            self.console.print(Text(format_raw(self._signature_data(signature))))
            self.console.print()
            return

        width = SIGNATURE_LABEL_WIDTH
        self.console.print(self._key_line(2, "Raw", width, Text(signature.raw)))
        if signature.decoded_hex is not None:
            self.console.print(self._key_line(2, "Decoded (hex)", width, Text(signature.decoded_hex)))
        elif signature.decode_error is not None:
            self.console.print(self._key_line(2, "Decoded", width, Text(signature.decode_error)))
        self.console.print()

    def _print_expiration(self, checks: List[ExpirationCheck]) -> None:
        for check in checks:
            self.console.print(_expiration_line(check))
        self.console.print()

    def _print_verification(self, outcome: VerificationOutcome) -> None:
        if outcome.status is VerificationStatus.VERIFIED:
            self.success("✓ Signature verified successfully")
        elif outcome.status is VerificationStatus.FAILED:
            reason = sanitize_string(outcome.reason or "unknown error")
            self.console.print(Text(f"✗ Signature verification failed: {reason}", style="red"))


def _when(check: ExpirationCheck) -> str:
    return format_instant(check.at) if check.at is not None else "an unrepresentable time"


def _expiration_line(check: ExpirationCheck) -> Text:
    delta = check.delta_seconds or 0
    status = check.status
    if status is ExpirationStatus.MISSING:
        return Text("No expiration claim found")
    if status is ExpirationStatus.UNKNOWN_TYPE:
        return Text(f"Unknown {check.claim} type: {check.value_type}", style="yellow")
    if status is ExpirationStatus.EXPIRED:
        return Text(f"✗ Token expired at {_when(check)} ({-delta} seconds ago)", style="red")
    if status is ExpirationStatus.VALID:
        return Text(f"✓ Token expires at {_when(check)} ({delta} seconds from now)", style="green")
    if status is ExpirationStatus.NOT_YET_VALID:
        return Text(
            f"⚠ Token not valid yet. Valid from {_when(check)} (in {delta} seconds)", style="yellow"
        )
    if status is ExpirationStatus.ACTIVE:
        return Text(f"✓ Token valid since {_when(check)} ({-delta} seconds ago)", style="green")
    if delta > 0:
        return Text(f"Issued at: {_when(check)} ({delta} seconds from now)")
    return Text(f"Issued at: {_when(check)} ({-delta} seconds ago)")
