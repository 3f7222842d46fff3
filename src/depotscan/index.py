import re
from pathlib import Path

from depotscan import vdf
from depotscan.library import steamapps_dir
from depotscan.types import AppIndexEntry, DepotIndex, DepotOwnership, Diagnostic, TextNode
from depotscan.utils import error, is_digits, is_file, warning

__all__ = ["DEPOT_CONTAINERS", "app_manifest_paths", "extract_depot_ids", "extract_dlc_ids", "read_app_manifest", "build_index"]

_APP_MANIFEST = re.compile(r"appmanifest_(?P<app_id>\d+)\.acf", re.IGNORECASE)

DEPOT_CONTAINERS = ("InstalledDepots", "MountedDepots", "DepotState")


def app_manifest_paths(root: Path) -> list[tuple[str, Path]]:
    steamapps = steamapps_dir(root)
    found: list[tuple[str, Path]] = []
    for path in sorted(steamapps.iterdir(), key=lambda p: p.name):  # raises OSError
        if is_file(path) and (match := _APP_MANIFEST.fullmatch(path.name)):
            found.append((match["app_id"], path))
    return found


def extract_depot_ids(app_state: TextNode) -> frozenset[str]:
    depot_ids: set[str] = set()
    for container in DEPOT_CONTAINERS:
        if (depots := vdf.find_node(app_state, container)) is not None:
            depot_ids.update(key for key in depots if is_digits(key))
    return frozenset(depot_ids)


def extract_dlc_ids(app_state: TextNode) -> frozenset[str]:
    dlc_ids: set[str] = set()
    if (installed_dlc := vdf.find_node(app_state, "InstalledDLC")) is not None:
        dlc_ids.update(value for value in installed_dlc.values() if is_digits(value))
    # depots of a DLC name it in their own entry
    for container in DEPOT_CONTAINERS:
        if (depots := vdf.find_node(app_state, container)) is None:
            continue
        for depot in vdf.child_nodes(depots).values():
            if is_digits(dlc_app_id := vdf.lookup(depot, "dlcappid")):
                dlc_ids.add(dlc_app_id)
    return frozenset(dlc_ids)


def read_app_manifest(app_id: str, path: Path) -> AppIndexEntry | Diagnostic:
    try:
        tree = vdf.parse_file(path)
    except OSError as ex:
        return error(f"Failed to read {path}: {ex}")
    if (app_state := vdf.find_node(tree, "AppState")) is None:
        return warning(f"No AppState in {path}, skipped")
    name = vdf.lookup(app_state, "name")
    return AppIndexEntry(
        app_id,
        name if isinstance(name, str) else "",
        extract_depot_ids(app_state),
        extract_dlc_ids(app_state),
    )


def build_index(roots: list[Path]) -> DepotIndex:
    """Depot ownership and per-app membership across every root.

    Manifests are read first, then merged in root order and file name order.
    A depot listed by two apps ends up owned by the one merged last.
    """
    diagnostics: list[Diagnostic] = []
    results: list[AppIndexEntry] = []

    for root in roots:
        try:
            manifest_paths = app_manifest_paths(root)
        except OSError as ex:
            diagnostics.append(warning(f"Failed to list {steamapps_dir(root)}: {ex}"))
            continue
        for app_id, path in manifest_paths:
            match read_app_manifest(app_id, path):
                case AppIndexEntry() as entry:
                    results.append(entry)
                case Diagnostic() as diagnostic:
                    diagnostics.append(diagnostic)

    ownership: DepotOwnership = {}
    apps: dict[str, AppIndexEntry] = {}
    for entry in results:
        apps[entry.app_id] = entry
        for depot_id in sorted(entry.depot_ids):
            previous = ownership.get(depot_id)
            if previous is not None and previous != entry.app_id:
                # FIXME: shared depots flip to whichever app is merged last, unclear if intended
                diagnostics.append(warning(f"Depot {depot_id} claimed by app {previous} and app {entry.app_id}, keeping {entry.app_id}"))
            ownership[depot_id] = entry.app_id

    return DepotIndex(ownership, apps, diagnostics)
