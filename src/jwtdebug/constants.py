"""Shared limits and exit codes."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes reported by the CLI."""

    SUCCESS = 0
    ERROR = 1
    INVALID_TOKEN = 2
    VERIFICATION_FAILED = 3
    CONFIG_ERROR = 4


# Key and config files larger than this are refused outright (1 MiB)
MAX_FILE_SIZE_BYTES = 1024 * 1024

# Longest stdin line accepted as a token candidate (1 MiB)
MAX_LINE_BYTES = 1024 * 1024

# Arrays longer than this are summarized instead of rendered inline
MAX_ARRAY_ITEMS = 10

# Error snippets never show more than this many characters of a token
SNIPPET_MAX_LENGTH = 20
