from pathlib import Path
from typing import Any

import pytest
import vdf

KEY_228980 = "ABCDEF1234567890ABCDEF1234567890"
KEY_228982 = "1234567890ABCDEF1234567890ABCDEF"
KEY_228990 = "FEDCBA0987654321FEDCBA0987654321"

MANIFEST_IDS = {
    "228980": "1234567890123456789",
    "228982": "9876543210987654321",
    "228990": "5555555555555555555",
    "329081": "7777777777777777777",
}


def write_vdf(path: Path, content: dict[str, Any], encoding: str = "utf-8"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(vdf.dumps(content, pretty=True), encoding=encoding)


def config_document(depot_keys: dict[str, str]) -> dict[str, Any]:
    depots = {depot: {"DecryptionKey": key} for depot, key in depot_keys.items()}
    return {"InstallConfigStore": {"Software": {"Valve": {"Steam": {"depots": depots}}}}}


def app_manifest_document(app_id: str, name: str, depots: dict[str, str], dlc: tuple[str, ...] = ()) -> dict[str, Any]:
    app_state: dict[str, Any] = {
        "appid": app_id,
        "Universe": "1",
        "name": name,
        "StateFlags": "4",
        "InstalledDepots": {depot: {"manifest": gid, "size": "1024"} for depot, gid in depots.items()},
    }
    if dlc:
        app_state["InstalledDLC"] = {str(i): dlc_id for i, dlc_id in enumerate(dlc)}
    return {"AppState": app_state}


def write_app_manifest(root: Path, app_id: str, name: str, depots: dict[str, str], dlc: tuple[str, ...] = ()):
    write_vdf(root / "steamapps" / f"appmanifest_{app_id}.acf", app_manifest_document(app_id, name, depots, dlc))


def write_library_index(root: Path, libraries: list[Path]):
    folders = {str(i): {"path": str(library), "label": ""} for i, library in enumerate(libraries)}
    write_vdf(root / "steamapps" / "libraryfolders.vdf", {"libraryfolders": folders})


def write_cached_manifest(root: Path, depot_id: str, manifest_id: str) -> Path:
    path = root / "steamapps" / "depotcache" / f"{depot_id}_{manifest_id}.manifest"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"dummy manifest content")
    return path


@pytest.fixture
def make_steam_root(tmp_path: Path):
    def make(
        depot_keys: dict[str, str],
        depots: dict[str, str],
        dlc: tuple[str, ...] = (),
        cached: tuple[str, ...] = (),
    ) -> Path:
        root = tmp_path / "Steam"
        write_vdf(root / "config" / "config.vdf", config_document(depot_keys))
        write_app_manifest(root, "228980", "Steamworks Common Redistributables", depots, dlc)
        write_library_index(root, [root])
        for depot_id in cached:
            write_cached_manifest(root, depot_id, MANIFEST_IDS[depot_id])
        return root

    return make


@pytest.fixture
def steam_root(make_steam_root) -> Path:
    """One app with three depots and a DLC, keys for two of the depots, all four manifests cached."""
    return make_steam_root(
        depot_keys={"228980": KEY_228980, "228982": KEY_228982},
        depots={depot: MANIFEST_IDS[depot] for depot in ("228980", "228982", "228990")},
        dlc=("329081",),
        cached=("228980", "228982", "228990", "329081"),
    )
