"""
Text codecs for safely moving untrusted strings into terminals, HTML and URLs.

- `strip_control_sequences` removes ANSI/VT escape sequences (compiler
  diagnostics arrive colourised whether or not colour was requested).
- `escape_html` is safe for element text and for quoted attribute values.
- `escape_query_component` percent-encodes text for a URL query value.
"""

from __future__ import annotations

from enum import Enum

ESC = "\x1b"
CSI_INTRODUCER = "["
_FINAL_BYTE_MIN = "\x40"
_FINAL_BYTE_MAX = "\x7f"

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

# Space is deliberately left literal; the links built from this are tolerant of it.
_QUERY_SAFE_BYTES = frozenset(
    b"abcdefghijklmnopqrstuvwxyz" b"ABCDEFGHIJKLMNOPQRSTUVWXYZ" b"0123456789" b"-. ~"
)


class _ScanState(Enum):
    NORMAL = "normal"
    SAW_ESCAPE = "saw_escape"
    IN_SEQUENCE = "in_sequence"


def strip_control_sequences(text: str) -> str:
    """
    Remove terminal escape sequences from `text`.

    A CSI sequence (ESC, '[', parameters, final byte in 0x40-0x7F) is dropped
    whole. An ESC followed by anything other than '[' drops both characters.
    A sequence truncated at the end of the input is dropped as well.
    """
    out: list[str] = []
    state = _ScanState.NORMAL

    for char in text:
        if state is _ScanState.NORMAL:
            if char == ESC:
                state = _ScanState.SAW_ESCAPE
            else:
                out.append(char)
        elif state is _ScanState.SAW_ESCAPE:
            state = _ScanState.IN_SEQUENCE if char == CSI_INTRODUCER else _ScanState.NORMAL
        elif _FINAL_BYTE_MIN <= char <= _FINAL_BYTE_MAX:
            state = _ScanState.NORMAL

    return "".join(out)


def escape_html(text: str) -> str:
    """Escape `&`, `<`, `>`, `"` and `'`; everything else passes through."""
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


def escape_query_component(text: str) -> str:
    """
    Percent-encode `text` (as UTF-8) for use as a URL query value.

    Letters, digits, '-', '.', ' ' and '~' are kept; every other byte becomes
    '%XX' with uppercase hex digits.
    """
    return "".join(
        chr(byte) if byte in _QUERY_SAFE_BYTES else f"%{byte:02X}"
        for byte in text.encode("utf-8")
    )


__all__ = ["escape_html", "escape_query_component", "strip_control_sequences"]
