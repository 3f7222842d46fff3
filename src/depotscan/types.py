from pathlib import Path
from typing import Literal, NamedTuple

__all__ = [
    "TextNode",
    "DepotKeys",
    "DepotOwnership",
    "Severity",
    "DepotType",
    "DepotStatus",
    "Diagnostic",
    "KeyResolution",
    "LibraryListing",
    "AppIndexEntry",
    "DepotIndex",
    "ManifestFile",
    "ResolveOptions",
    "DepotRecord",
    "InstalledDepot",
    "AppData",
    "ScanResult",
    "dlc_app_ids",
]

type TextNode = dict[str, str | TextNode]
type DepotKeys = dict[str, str]
type DepotOwnership = dict[str, str]

type Severity = Literal["info", "warning", "error"]
type DepotType = Literal["main", "dlc", "orphan", "unknown"]
type DepotStatus = Literal["pending", "valid", "invalid"]


class Diagnostic(NamedTuple):
    severity: Severity
    message: str

    def __str__(self) -> str:
        return self.message


class KeyResolution(NamedTuple):
    keys: DepotKeys
    diagnostics: list[Diagnostic]


class LibraryListing(NamedTuple):
    roots: list[Path]
    diagnostics: list[Diagnostic]


class AppIndexEntry(NamedTuple):
    app_id: str
    name: str
    depot_ids: frozenset[str]
    dlc_ids: frozenset[str]


def dlc_app_ids(apps: dict[str, AppIndexEntry]) -> set[str]:
    return {dlc_id for app in apps.values() for dlc_id in app.dlc_ids}


class DepotIndex(NamedTuple):
    ownership: DepotOwnership
    apps: dict[str, AppIndexEntry]
    diagnostics: list[Diagnostic]

    @property
    def dlc_app_ids(self) -> set[str]:
        return dlc_app_ids(self.apps)


class ManifestFile(NamedTuple):
    path: Path
    filename: str
    root: Path | None = None


class ResolveOptions(NamedTuple):
    default_app_id: str = ""
    infer_app_id: bool = True


class DepotRecord(NamedTuple):
    path: Path
    filename: str
    depot_id: str
    manifest_id: str
    app_id: str
    decryption_key: str | None
    type: DepotType
    status: DepotStatus
    validation_errors: tuple[str, ...]
    root: Path | None = None


class InstalledDepot(NamedTuple):
    depot_id: str
    manifest_id: str
    type: DepotType
    decryption_key: str | None


class AppData(NamedTuple):
    app_id: str
    name: str
    depots: list[InstalledDepot]
    missing_keys: list[str]
    diagnostics: list[Diagnostic]
    loaded: bool = True


class ScanResult(NamedTuple):
    roots: list[Path]
    records: list[DepotRecord]
    keys: DepotKeys
    missing_keys: list[str]
    diagnostics: list[Diagnostic]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.severity != "error"]

    @property
    def errors(self) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.severity == "error"]
