"""Decoding of JavaScript string and numeric literal tokens."""

from __future__ import annotations

import string

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_TERMINATORS = "\n\u2028\u2029"

# Largest integer a JS number holds exactly.
MAX_SAFE_INTEGER = 2**53


def _is_hex(text: str, length: int | None = None) -> bool:
    if not text or (length is not None and len(text) != length):
        return False
    return all(c in string.hexdigits for c in text)


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs produced by ``\\uD83D\\uDE00`` escapes."""
    if not any(0xD800 <= ord(c) <= 0xDFFF for c in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


def decode_string_body(body: str) -> str:
    """Cook the text between the quotes of a string or template literal."""
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue

        nxt = body[i + 1]
        if nxt in _SIMPLE_ESCAPES and not (nxt == "0" and i + 2 < n and body[i + 2].isdigit()):
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "x" and _is_hex(body[i + 2 : i + 4], 2):
            out.append(chr(int(body[i + 2 : i + 4], 16)))
            i += 4
        elif nxt == "u" and body.startswith("{", i + 2):
            end = body.find("}", i + 3)
            digits = body[i + 3 : end] if end != -1 else ""
            if _is_hex(digits) and int(digits, 16) <= 0x10FFFF:
                out.append(chr(int(digits, 16)))
                i = end + 1
            else:
                out.append(nxt)
                i += 2
        elif nxt == "u" and _is_hex(body[i + 2 : i + 6], 4):
            out.append(chr(int(body[i + 2 : i + 6], 16)))
            i += 6
        elif nxt == "\r":
            # Line continuation (CRLF or CR)
            i += 3 if body.startswith("\n", i + 2) else 2
        elif nxt in _LINE_TERMINATORS:
            i += 2
        else:
            # Identity escape: \' \" \\ \` and any other character
            out.append(nxt)
            i += 2
    return _join_surrogates("".join(out))


def decode_string_literal(raw: str) -> str:
    """Decode a quoted string token such as ``'a\\nb'``."""
    if len(raw) >= 2 and raw[0] in "'\"`" and raw[-1] == raw[0]:
        raw = raw[1:-1]
    return decode_string_body(raw)


def parse_number(raw: str) -> int | float:
    """Parse a JS numeric literal token.

    Integral values that a JS number holds exactly come back as ``int`` so
    they serialize as ``1`` rather than ``1.0``.

    Raises:
        ValueError: For BigInt literals and malformed tokens
    """
    text = raw.replace("_", "")
    if text.endswith("n"):
        raise ValueError(f"BigInt literal is not supported: {raw}")

    prefix = text[:2].lower()
    if prefix == "0x":
        return int(text[2:], 16)
    if prefix == "0o":
        return int(text[2:], 8)
    if prefix == "0b":
        return int(text[2:], 2)
    if len(text) > 1 and text[0] == "0" and text.isdigit():
        # Legacy octal (017) unless a non-octal digit makes it decimal (019)
        return int(text, 8) if all(c in "01234567" for c in text) else int(text, 10)

    value = float(text)
    if value.is_integer() and abs(value) <= MAX_SAFE_INTEGER:
        return int(value)
    return value
