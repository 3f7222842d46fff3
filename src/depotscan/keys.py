from collections.abc import Callable
from pathlib import Path

from depotscan import fallback, vdf
from depotscan.types import DepotKeys, Diagnostic, KeyResolution, TextNode
from depotscan.utils import error, info, is_digits, is_file, is_hex_key, read_text

__all__ = ["DEPOTS_PATHS", "DECRYPTION_KEY_FIELDS", "find_depots", "structural_keys", "resolve_keys", "read_keys"]

# where config.vdf keeps its depots section, depending on how much of the tree survived
DEPOTS_PATHS: tuple[tuple[str, ...], ...] = (
    ("InstallConfigStore", "Software", "Valve", "Steam", "depots"),
    ("Software", "Valve", "Steam", "depots"),
    ("Steam", "depots"),
    ("depots",),
)

DECRYPTION_KEY_FIELDS = ("DecryptionKey", "decryptionkey", "decryptionKey", "DECRYPTIONKEY")


def find_depots(tree: TextNode) -> TextNode | None:
    for path in DEPOTS_PATHS:
        if (depots := vdf.find_path(tree, path)) is not None:
            return depots
    return None


def structural_keys(text: str) -> DepotKeys:
    depot_keys: DepotKeys = {}
    if (depots := find_depots(vdf.parse(text))) is None:
        return depot_keys
    for depot_id, depot in vdf.child_nodes(depots).items():
        if not is_digits(depot_id):
            continue
        key = vdf.lookup(depot, *DECRYPTION_KEY_FIELDS)
        if isinstance(key, str) and is_hex_key(key.strip()):
            depot_keys[depot_id] = key.strip()
    return depot_keys


_STRATEGIES: tuple[tuple[str, Callable[[str], DepotKeys]], ...] = (
    ("structural parse", structural_keys),
    ("pattern match", fallback.pattern_match),
    ("line scan", fallback.line_scan),
)


def resolve_keys(text: str) -> KeyResolution:
    """Depot keys from config.vdf content.

    Each strategy gets the raw text, the first one returning anything wins.
    Finding nothing is not an error, only reported as info.
    """
    diagnostics: list[Diagnostic] = []
    for name, strategy in _STRATEGIES:
        if depot_keys := strategy(text):
            return KeyResolution(depot_keys, diagnostics)
        diagnostics.append(info(f"No decryption keys found by {name}"))
    return KeyResolution({}, diagnostics)


def read_keys(config_path: Path) -> KeyResolution:
    if not is_file(config_path):
        return KeyResolution({}, [error(f"Config file not found: {config_path}")])
    try:
        text = read_text(config_path)
    except OSError as ex:
        return KeyResolution({}, [error(f"Failed to read {config_path}: {ex}")])
    return resolve_keys(text)
