"""Tests for report rendering."""

import io
import json
from datetime import datetime, timezone

import jwt
import pytest
from rich.console import Console

from jwtdebug.inspector import inspect_token
from jwtdebug.models import ExpirationCheck, ExpirationStatus, Options
from jwtdebug.output import Printer, _expiration_line, format_raw, to_json

from conftest import HMAC_SECRET

NOV_2023 = 1700000000


def plain_console() -> Console:
    return Console(file=io.StringIO(), color_system=None, highlight=False, soft_wrap=True)


def render(token: str, **options) -> tuple:
    """Render a token and return (stdout, stderr)."""
    opts = Options(color=False, **options)
    out, err = plain_console(), plain_console()
    Printer(opts, console=out, err_console=err).print_report(inspect_token(token, opts))
    return out.file.getvalue(), err.file.getvalue()


@pytest.fixture
def token() -> str:
    return jwt.encode(
        {"iss": "me", "exp": NOV_2023, "role": "admin", "groups": ["a", "b"]},
        HMAC_SECRET,
        algorithm="HS256",
    )


class TestPretty:
    """Human-readable sections."""

    def test_claims_sections(self, token):
        out, _ = render(token)
        lines = out.splitlines()

        assert lines[0] == "CLAIMS:"
        assert "  Standard Claims:" in lines
        assert "  Custom Claims:" in lines
        assert "    Issuer:     me" in lines
        assert "    Expiration: 1700000000 (2023-11-14T22:13:20Z)" in lines
        assert "    groups:     [a, b]" in lines
        assert "    role:       admin" in lines

    def test_header_section(self, token):
        out, _ = render(token, show_header=True)
        lines = out.splitlines()
        assert lines[0] == "HEADER:"
        assert "  alg: HS256" in lines
        assert "  typ: JWT" in lines

    def test_signature_section(self, token):
        out, _ = render(token, show_signature=True, decode_signature=True, show_claims=False)
        lines = out.splitlines()
        assert lines[0] == "SIGNATURE:"
        assert lines[1] == f"  Raw:           {token.split('.')[2]}"
        assert lines[2].startswith("  Decoded (hex): ")

    def test_unverified_notice_on_stderr(self, token):
        out, err = render(token)
        assert "claims are unverified" in err
        assert "claims are unverified" not in out

    def test_quiet_suppresses_notice(self, token):
        _, err = render(token, quiet=True)
        assert err == ""

    def test_markup_in_claims_printed_literally(self):
        hostile = jwt.encode({"name": "[bold red]boom[/]"}, HMAC_SECRET, algorithm="HS256")
        out, _ = render(hostile)
        assert "[bold red]boom[/]" in out

    def test_control_characters_escaped(self):
        hostile = jwt.encode({"name": "a\x1b[2Jb", "k\u202e": 1}, HMAC_SECRET, algorithm="HS256")
        out, _ = render(hostile)
        assert "\x1b" not in out
        assert "\u202e" not in out
        assert "a\\x1B[2Jb" in out
        assert "k\\u202E" in out

    def test_verification_lines(self, hmac_key_file, hs256_valid, hs256_expired):
        out, err = render(hs256_valid, verify=True, key_file=hmac_key_file)
        assert "✓ Signature verified successfully" in out
        assert "unverified" not in err

        out, _ = render(hs256_expired, verify=True, key_file=hmac_key_file)
        assert "✗ Signature verification failed:" in out


class TestExpirationLines:
    """Wording of the expiration section."""

    AT = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def line(self, status, delta=None, claim="exp", **extra) -> str:
        check = ExpirationCheck(claim=claim, status=status, at=self.AT, delta_seconds=delta, **extra)
        return _expiration_line(check).plain

    def test_expired(self):
        assert self.line(ExpirationStatus.EXPIRED, -30) == (
            "✗ Token expired at 2023-11-14T22:13:20Z (30 seconds ago)"
        )

    def test_valid(self):
        assert self.line(ExpirationStatus.VALID, 30) == (
            "✓ Token expires at 2023-11-14T22:13:20Z (30 seconds from now)"
        )

    def test_not_yet_valid(self):
        assert self.line(ExpirationStatus.NOT_YET_VALID, 5, claim="nbf") == (
            "⚠ Token not valid yet. Valid from 2023-11-14T22:13:20Z (in 5 seconds)"
        )

    def test_active(self):
        assert self.line(ExpirationStatus.ACTIVE, -5, claim="nbf").startswith("✓ Token valid since")

    def test_issued(self):
        assert self.line(ExpirationStatus.ISSUED, -7, claim="iat") == (
            "Issued at: 2023-11-14T22:13:20Z (7 seconds ago)"
        )

    def test_missing(self):
        check = ExpirationCheck(claim="exp", status=ExpirationStatus.MISSING)
        assert _expiration_line(check).plain == "No expiration claim found"

    def test_unknown_type(self):
        check = ExpirationCheck(claim="exp", status=ExpirationStatus.UNKNOWN_TYPE, value_type="string")
        assert _expiration_line(check).plain == "Unknown exp type: string"


class TestMachineFormats:
    """JSON and raw output."""

    def test_json_contains_requested_sections(self, token, capsys):
        opts = Options(color=False, output_format="json", show_header=True, quiet=True)
        Printer(opts, console=plain_console(), err_console=plain_console()).print_report(
            inspect_token(token, opts)
        )
        data = json.loads(capsys.readouterr().out)
        assert data["header"]["alg"] == "HS256"
        assert data["claims"]["role"] == "admin"
        assert "signature" not in data
        assert "verification" not in data

    def test_json_escapes_non_ascii(self, capsys):
        hostile = jwt.encode({"name": "x\u202ey"}, HMAC_SECRET, algorithm="HS256")
        opts = Options(color=False, output_format="json", quiet=True)
        Printer(opts, console=plain_console(), err_console=plain_console()).print_report(
            inspect_token(hostile, opts)
        )
        out = capsys.readouterr().out
        assert "\u202e" not in out
        assert "\\u202e" in out

    def test_raw_claims_only(self, token, capsys):
        opts = Options(color=False, raw_claims=True, show_header=True)
        err = plain_console()
        Printer(opts, console=plain_console(), err_console=err).print_report(inspect_token(token, opts))
        assert json.loads(capsys.readouterr().out)["iss"] == "me"
        assert err.file.getvalue() == ""

    def test_non_finite_numbers_stay_valid_json(self):
        text = to_json({"exp": float("inf"), "n": [float("nan"), 1.5], "low": float("-inf")})
        assert "Infinity" not in text and "NaN" not in text
        assert json.loads(text) == {"exp": "inf", "n": ["nan", 1.5], "low": "-inf"}

    def test_format_raw_sorted(self):
        assert format_raw({"b": 1, "a": [1, 2], "c": {"x": 1}}) == (
            "a: [1, 2]\nb: 1\nc: {object with 1 keys}"
        )

    def test_raw_mode_sections(self, token):
        out, _ = render(token, output_format="raw")
        lines = out.splitlines()
        assert lines[0] == "CLAIMS:"
        assert lines[1] == "exp: 1700000000"
        assert "role: admin" in lines
