import re

from depotscan.types import DepotKeys
from depotscan.utils import is_hex_key

__all__ = ["pattern_match", "line_scan", "extract"]

_DEPOT_BLOCK = re.compile(
    r'"(?P<depot_id>\d+)"\s*\{\s*"DecryptionKey"\s+"(?P<key>[0-9A-Fa-f]+)"\s*\}',
    re.IGNORECASE,
)
_DEPOT_LINE = re.compile(r'"(?P<depot_id>\d+)"')
_KEY_LINE = re.compile(r'"DecryptionKey"\s+"(?P<key>[0-9A-Fa-f]+)"', re.IGNORECASE)


def pattern_match(text: str) -> DepotKeys:
    """Depot blocks holding nothing but a DecryptionKey, wherever they sit."""
    depot_keys: DepotKeys = {}
    for match in _DEPOT_BLOCK.finditer(text):
        if is_hex_key(match["key"]):
            depot_keys[match["depot_id"]] = match["key"]
    return depot_keys


def line_scan(text: str) -> DepotKeys:
    """Walk lines keeping track of brace depth.

    Picks up keys in depot blocks that carry sibling entries next to the
    DecryptionKey, which the single pattern cannot span.
    """
    depot_keys: DepotKeys = {}
    depth = 0
    pending: str | None = None
    # (depot id, depth of its block) while inside one
    depot: tuple[str, int] | None = None

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if depot is None and (match := _DEPOT_LINE.fullmatch(line)):
            pending = match["depot_id"]
            continue
        if line == "{":
            depth += 1
            if depot is None and pending is not None:
                depot = (pending, depth)
            pending = None
            continue
        if line == "}":
            if depot is not None and depth == depot[1]:
                depot = None
            depth = max(depth - 1, 0)
            continue
        pending = None
        if depot is not None and depth == depot[1] and (match := _KEY_LINE.fullmatch(line)):
            if is_hex_key(match["key"]):
                depot_keys[depot[0]] = match["key"]

    return depot_keys


def extract(text: str) -> DepotKeys:
    return pattern_match(text) or line_scan(text)
