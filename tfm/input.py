"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into key tokens such as
``"j"``, ``"ctrl+d"``, ``"pgdown"`` or ``"enter"``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS = {
    b"\t": "tab",
    b"\r": "enter",
    b"\n": "enter",
    b"\x08": "backspace",
    b"\x7f": "backspace",
    b" ": "space",
}

_CSI_FINAL = {
    b"A": "up",
    b"B": "down",
    b"C": "right",
    b"D": "left",
    b"H": "home",
    b"F": "end",
}

_CSI_TILDE = {
    b"1": "home",
    b"7": "home",
    b"4": "end",
    b"8": "end",
    b"3": "delete",
    b"5": "pgup",
    b"6": "pgdown",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_utf8(fd: int, lead: bytes) -> str:
    data = lead
    for _ in range(_utf8_length(lead[0]) - 1):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data.decode("utf-8", errors="replace")


def _read_escape(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "esc"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "esc"
    code = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if code is None:
        return "esc"
    if code in _CSI_FINAL:
        return _CSI_FINAL[code]
    if seq == b"[" and code.isdigit():
        params = code
        while True:
            part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return "esc"
            if part == b"~":
                return _CSI_TILDE.get(params, "")
            if part in _CSI_FINAL:
                return _CSI_FINAL[part]
            params += part
            if len(params) > 16:
                return ""
    return ""


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; ``""`` on timeout or unknown input."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _CONTROL_TOKENS:
        return _CONTROL_TOKENS[ch]
    if ch == b"\x1b":
        return _read_escape(fd)
    code = ch[0]
    if 1 <= code <= 26:
        return f"ctrl+{chr(code + 96)}"
    if code < 0x20:
        return ""
    if code >= 0x80:
        return _read_utf8(fd, ch)
    return ch.decode("ascii")


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
