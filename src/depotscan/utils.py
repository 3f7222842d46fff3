import re
from pathlib import Path
from typing import Any

from depotscan.types import Diagnostic

KEY_MIN_LENGTH = 32
KEY_MAX_LENGTH = 64

_DIGITS = re.compile(r"\d+")
_HEX = re.compile(r"[0-9A-Fa-f]+")


def is_digits(value: Any) -> bool:
    return isinstance(value, str) and _DIGITS.fullmatch(value) is not None


def is_hex_key(value: Any, min_length: int = KEY_MIN_LENGTH, max_length: int = KEY_MAX_LENGTH) -> bool:
    """Whole-value check, the caller is expected to strip surrounding whitespace first."""
    if not isinstance(value, str) or not min_length <= len(value) <= max_length:
        return False
    return _HEX.fullmatch(value) is not None


def read_text(path: Path) -> str:
    # raises OSError; a leading BOM is dropped, undecodable bytes are replaced
    return path.read_text(encoding="utf-8-sig", errors="replace")


def is_dir(path: Path) -> bool:
    """Like Path.is_dir(), but any OSError counts as absent, not only ENOENT."""
    try:
        return path.is_dir()
    except OSError:
        return False


def is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def info(message: str) -> Diagnostic:
    return Diagnostic("info", message)


def warning(message: str) -> Diagnostic:
    return Diagnostic("warning", message)


def error(message: str) -> Diagnostic:
    return Diagnostic("error", message)


def unique[T](items: list[T]) -> list[T]:
    return list(dict.fromkeys(items))
