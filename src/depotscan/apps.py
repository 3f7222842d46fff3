from pathlib import Path

from depotscan import vdf
from depotscan.keys import read_keys
from depotscan.library import config_path, list_content_roots, steamapps_dir
from depotscan.types import AppData, DepotType, Diagnostic, InstalledDepot, TextNode
from depotscan.utils import error, is_digits, is_dir, is_file, warning

__all__ = ["DLC_DEPOT_OFFSET", "classify_depot", "extract_installed_depots", "find_app_manifest", "load_app"]

# DLC depots are numbered well past the ids of their base game
DLC_DEPOT_OFFSET = 100000


def classify_depot(depot_id: str, app_id: str) -> DepotType:
    if not (is_digits(depot_id) and is_digits(app_id)):
        return "unknown"
    if int(depot_id) > int(app_id) + DLC_DEPOT_OFFSET:
        return "dlc"
    return "main"


def extract_installed_depots(app_state: TextNode) -> list[tuple[str, str]]:
    """(depot id, manifest id) pairs of InstalledDepots, in file order."""
    depots: list[tuple[str, str]] = []
    if (installed := vdf.find_node(app_state, "InstalledDepots")) is None:
        return depots
    for depot_id, value in installed.items():
        if not is_digits(depot_id):
            continue
        match value:
            case str():
                manifest_id = value
            case dict():
                manifest_id = vdf.lookup(value, "manifest")
                manifest_id = manifest_id if isinstance(manifest_id, str) else ""
        depots.append((depot_id, manifest_id))
    return depots


def find_app_manifest(app_id: str, roots: list[Path]) -> Path | None:
    for root in roots:
        if is_file(path := steamapps_dir(root) / f"appmanifest_{app_id}.acf"):
            return path
    return None


def load_app(app_id: str, primary_root: Path, include_dlc: bool = True) -> AppData:
    diagnostics: list[Diagnostic] = []

    def failed(message: str) -> AppData:
        return AppData(app_id, "", [], [], [*diagnostics, error(message)], loaded=False)

    if not is_digits(app_id):
        return failed(f"Invalid app ID: {app_id!r}")
    if not is_dir(primary_root):
        return failed(f"Steam installation not found at: {primary_root}")

    listing = list_content_roots(primary_root)
    diagnostics.extend(listing.diagnostics)

    if (manifest_path := find_app_manifest(app_id, listing.roots)) is None:
        return failed(f"App manifest not found for app ID {app_id}")
    try:
        tree = vdf.parse_file(manifest_path)
    except OSError as ex:
        return failed(f"Failed to read {manifest_path}: {ex}")
    if (app_state := vdf.find_node(tree, "AppState")) is None:
        return failed(f"No AppState in {manifest_path}")
    name = vdf.lookup(app_state, "name")
    name = name if isinstance(name, str) else ""

    resolution = read_keys(config_path(primary_root))
    diagnostics.extend(resolution.diagnostics)

    depots: list[InstalledDepot] = []
    missing_keys: list[str] = []
    for depot_id, manifest_id in extract_installed_depots(app_state):
        depot_type = classify_depot(depot_id, app_id)
        if depot_type == "dlc" and not include_dlc:
            continue
        if (key := resolution.keys.get(depot_id)) is None:
            missing_keys.append(depot_id)
            diagnostics.append(warning(f"No decryption key found for depot {depot_id}"))
        depots.append(InstalledDepot(depot_id, manifest_id, depot_type, key))

    return AppData(app_id, name, depots, missing_keys, diagnostics)
