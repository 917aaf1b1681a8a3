"""Terminal-safe rendering of untrusted strings.

JWT claims are attacker-controlled. Everything decoded from a token passes
through ``sanitize_string`` before it is printed, so control characters, ANSI
escapes and "Trojan Source" style invisible characters show up as visible
escape sequences instead of acting on the terminal.
"""

from .constants import SNIPPET_MAX_LENGTH

_NAMED_ESCAPES = {
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def _is_display_attack_char(code: int) -> bool:
    return (
        0x200B <= code <= 0x200F      # zero-width chars, LRM/RLM
        or 0x202A <= code <= 0x202E   # bidi embeddings and overrides
        or 0x2066 <= code <= 0x2069   # bidi isolates
        or code == 0xFEFF             # BOM / zero-width no-break space
    )


def sanitize_string(value: str) -> str:
    """Escape control, C1, bidi and zero-width characters in a string.

    ``\\n``, ``\\r`` and ``\\t`` become their backslash forms, other C0 controls
    (including ESC) and DEL become ``\\xHH``, C1 controls and the invisible
    display-attack characters become ``\\uHHHH``. Everything else passes through.
    """
    if not value:
        return value

    out = []
    for char in value:
        named = _NAMED_ESCAPES.get(char)
        if named is not None:
            out.append(named)
            continue

        code = ord(char)
        if code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02X}")
        elif 0x80 <= code <= 0x9F or _is_display_attack_char(code):
            out.append(f"\\u{code:04X}")
        else:
            out.append(char)
    return ''.join(out)


def token_snippet(token: str) -> str:
    """Short, sanitized preview of a token for error messages.

    Tokens are credentials, so error output never carries the whole thing.
    """
    if len(token) > SNIPPET_MAX_LENGTH:
        token = f"{token[:SNIPPET_MAX_LENGTH - 3]}..."
    return sanitize_string(token)
