"""Low-level terminal input decoding.

Reads raw bytes from stdin and turns them into key tokens. Only a lone
escape byte is reported as ``ESC``; escape sequences that are not part of the
key map are read to their final byte and reported as ``UNKNOWN``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
UNKNOWN_KEY = "UNKNOWN"
# Longest CSI parameter run accepted before giving up on a sequence.
MAX_CSI_PARAMETER_BYTES = 16

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}
_CURSOR_KEYS = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
}
# ESC [ <n> ~
_TILDE_KEYS = {
    "1": "HOME",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
}
_SHIFTED_KEYS = {
    "C": "SHIFT_RIGHT",
    "D": "SHIFT_LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _decode_csi(fd: int) -> str:
    """Consume ``ESC [`` parameters through the final byte and map the key."""
    params = bytearray()
    while True:
        byte = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if byte is None:
            return UNKNOWN_KEY
        if 0x40 <= byte[0] <= 0x7E:
            final = byte.decode("ascii")
            break
        params.extend(byte)
        if len(params) > MAX_CSI_PARAMETER_BYTES:
            return UNKNOWN_KEY

    text = params.decode("ascii", errors="replace")
    if final == "~":
        return _TILDE_KEYS.get(text, UNKNOWN_KEY)
    if text in {"", "1"}:
        return _CURSOR_KEYS.get(final, UNKNOWN_KEY)
    if text == "1;2":
        return _SHIFTED_KEYS.get(final, UNKNOWN_KEY)
    # Ctrl/Alt-modified cursor keys and everything else.
    return UNKNOWN_KEY


def _decode_ss3(fd: int) -> str:
    """Map ``ESC O <x>`` (application cursor keys, F1-F4)."""
    byte = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if byte is None:
        return UNKNOWN_KEY
    return _CURSOR_KEYS.get(byte.decode("latin-1"), UNKNOWN_KEY)


def _decode_escape(fd: int) -> str:
    follower = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if follower is None:
        return "ESC"
    if follower == b"[":
        return _decode_csi(fd)
    if follower == b"O":
        return _decode_ss3(fd)
    if follower == b"\x1b":
        # Some terminals send Alt+<key> as ESC followed by the key's own sequence.
        inner = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if inner is None:
            return "ESC"
        if inner == b"[":
            _decode_csi(fd)
        elif inner == b"O":
            _decode_ss3(fd)
        return UNKNOWN_KEY
    # Alt+<printable>.
    return UNKNOWN_KEY


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, or ``""`` when nothing arrives within ``timeout_ms``."""
    if timeout_ms is not None:
        ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return ""

    ch = os.read(fd, 1)
    if not ch:
        return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control
    if ch == b"\x1b":
        return _decode_escape(fd)
    return ch.decode("utf-8", errors="replace")
