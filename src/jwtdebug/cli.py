"""Command-line interface for jwtdebug."""

import logging
import sys
from typing import IO, Iterable, Iterator, Optional, Tuple

import click
from click.core import ParameterSource
from click.shell_completion import get_completion_class

from . import __version__
from .config import apply_config, config_from_options, load_config, save_config
from .constants import MAX_LINE_BYTES, ExitCode
from .errors import ConfigError, JWTDebugError, TokenFormatError
from .inspector import inspect_token
from .logging_config import setup_logging
from .models import Options
from .normalize import normalize_token
from .output import Printer

logger = logging.getLogger(__name__)

COMPLETION_SHELLS = ("bash", "zsh", "fish")

USAGE_HINT = """\
Error: no token provided

Usage: jwtdebug [options] <token>
       jwtdebug [options] -           # read from stdin
       command | jwtdebug [options]   # read from pipe

Run 'jwtdebug --help' for more information."""

# Flags that turn on with --all
ALL_SECTIONS = ("show_header", "show_claims", "show_signature", "show_expiration", "decode_signature")


def explicit_options(ctx: click.Context, names: Iterable[str]) -> set:
    """Names of the parameters the user actually passed (flag or environment)."""
    explicit = set()
    for name in names:
        source = ctx.get_parameter_source(name)
        if source in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            explicit.add(name)
    return explicit


def completion_script(shell: str) -> str:
    """Shell completion script generated by click for this command."""
    completion_class = get_completion_class(shell)
    completion = completion_class(cli, {}, "jwtdebug", "_JWTDEBUG_COMPLETE")
    return completion.source()


def read_stdin_tokens(stream: IO[bytes]) -> Iterator[str]:
    """Yield non-blank stdin lines, one token candidate each.

    Raises:
        JWTDebugError: If a line is longer than ``MAX_LINE_BYTES``
    """
    while True:
        line = stream.readline(MAX_LINE_BYTES + 1)
        if not line:
            return
        content = line.rstrip(b"\r\n")
        if len(content) > MAX_LINE_BYTES:
            raise JWTDebugError(f"failed to read stdin: line exceeds {MAX_LINE_BYTES} bytes")
        text = content.decode("utf-8", errors="replace").strip()
        if text:
            yield text


def process_token(raw: str, options: Options, printer: Printer) -> ExitCode:
    """Normalize, inspect and print one token; return its exit code."""
    token = normalize_token(raw, strict=options.strict)
    try:
        report = inspect_token(token, options)
    except TokenFormatError as e:
        printer.error(str(e))
        return ExitCode.INVALID_TOKEN

    printer.print_report(report)
    return report.exit_code


def process_tokens(tokens: Iterable[str], options: Options, printer: Printer) -> Tuple[ExitCode, int]:
    """Process tokens in order, stopping at the first failure.

    Returns:
        Exit code and the number of tokens processed
    """
    count = 0
    for raw in tokens:
        count += 1
        exit_code = process_token(raw, options, printer)
        if exit_code != ExitCode.SUCCESS:
            return exit_code, count
    return ExitCode.SUCCESS, count


def process_stdin(options: Options, printer: Printer, explicit: bool) -> ExitCode:
    stdin = click.get_binary_stream("stdin")
    if stdin.isatty():
        if not explicit:
            click.echo(USAGE_HINT, err=True)
            return ExitCode.ERROR
        printer.notice("Reading token from stdin... (press Ctrl+D when done)")

    try:
        exit_code, count = process_tokens(read_stdin_tokens(stdin), options, printer)
    except JWTDebugError as e:
        printer.error(str(e))
        return ExitCode.ERROR

    if count == 0:
        printer.error("no token provided on stdin")
        return ExitCode.ERROR
    return exit_code


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("tokens", nargs=-1)
@click.option("--all", "-a", "show_all", is_flag=True, help="Show header, claims, signature and expiration")
@click.option("--header", "-H", "show_header", is_flag=True, help="Show the token header")
@click.option("--claims/--no-claims", "-c", "show_claims", default=True, help="Show the token claims")
@click.option("--signature", "-s", "show_signature", is_flag=True, help="Show the signature segment")
@click.option("--expiration", "-e", "show_expiration", is_flag=True, help="Check exp, nbf and iat")
@click.option("--decode-signature", "decode_signature", is_flag=True, help="Decode the signature to hex")
@click.option("--raw-claims", is_flag=True, help="Print only the claims as JSON")
@click.option("--verify", "-V", is_flag=True, help="Verify the token signature")
@click.option("--key-file", "-k", default="", help="HMAC secret or PEM public key/certificate")
@click.option(
    "--ignore-expiration",
    is_flag=True,
    help="Accept tokens whose only faults are exp/nbf during verification",
)
@click.option(
    "--output",
    "-o",
    "output_format",
    type=click.Choice(["pretty", "json", "raw"]),
    default="pretty",
    help="Output format",
)
@click.option("--color/--no-color", default=True, help="Colorize output")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file to use")
@click.option("--save-config", "save_config_requested", is_flag=True, help="Save the current settings as defaults")
@click.option("--strict", is_flag=True, help="Disable token extraction from surrounding text")
@click.option("--quiet", "-q", is_flag=True, help="Suppress informational notices")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr")
@click.option(
    "--completion",
    type=click.Choice(COMPLETION_SHELLS, case_sensitive=False),
    help="Print a shell completion script and exit",
)
@click.version_option(version=__version__, prog_name="jwtdebug")
@click.pass_context
def cli(
    ctx: click.Context,
    tokens: Tuple[str, ...],
    show_all: bool,
    config_path: Optional[str],
    save_config_requested: bool,
    completion: Optional[str],
    **flags,
):
    """Decode, inspect and verify JSON Web Tokens.

    Tokens are read from the arguments, from stdin when the only argument is
    '-', or from a pipe. Surrounding text such as 'Bearer ' or a cookie name
    is stripped unless --strict is given.

    Example:
        jwtdebug eyJhbGciOi...
        jwtdebug -a --verify -k public.pem "$TOKEN"
        pbpaste | jwtdebug -o json
    """
    setup_logging("DEBUG" if flags["verbose"] else None, use_colors=flags["color"])

    if completion:
        click.echo(completion_script(completion.lower()))
        ctx.exit(ExitCode.SUCCESS)

    options = Options(**flags)
    printer = Printer(options)

    try:
        config = load_config(config_path, missing_ok=save_config_requested)
    except ConfigError as e:
        printer.error(f"failed to load config: {e}")
        ctx.exit(ExitCode.CONFIG_ERROR)

    options = apply_config(options, config, explicit_options(ctx, flags))
    if show_all:
        options = options.model_copy(update={name: True for name in ALL_SECTIONS})
    logger.debug(f"Effective options: {options.model_dump(exclude={'key_file'})}")

    printer = Printer(options)

    if save_config_requested:
        try:
            path = save_config(config_from_options(config, options), config_path)
        except ConfigError as e:
            printer.error(f"Failed to save config: {e}")
            ctx.exit(ExitCode.CONFIG_ERROR)
        printer.success("Configuration saved successfully.")
        logger.debug(f"Configuration written to {path}")
        if not tokens:
            ctx.exit(ExitCode.SUCCESS)

    if tokens == ("-",):
        ctx.exit(process_stdin(options, printer, explicit=True))
    if not tokens:
        ctx.exit(process_stdin(options, printer, explicit=False))

    exit_code, _ = process_tokens(tokens, options, printer)
    ctx.exit(exit_code)


def main(argv: Optional[list] = None) -> None:
    """Console script entry point."""
    cli.main(args=argv, prog_name="jwtdebug")


if __name__ == "__main__":
    main(sys.argv[1:])
