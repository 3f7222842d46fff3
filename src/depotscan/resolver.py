import re
from pathlib import Path

from depotscan.library import depotcache_dirs
from depotscan.types import (
    AppIndexEntry,
    DepotKeys,
    DepotOwnership,
    DepotRecord,
    DepotType,
    Diagnostic,
    ManifestFile,
    ResolveOptions,
    dlc_app_ids,
)
from depotscan.utils import is_digits, is_file, warning

__all__ = [
    "find_manifest_files",
    "extract_manifest_id",
    "extract_depot_id",
    "infer_app_id",
    "determine_type",
    "validate",
    "resolve",
    "resolve_file",
]

_MANIFEST_ID = re.compile(r"\d{10,22}")
_LEADING_DEPOT_ID = re.compile(r"(?P<depot_id>\d+)_")
_TAGGED_DEPOT_ID = re.compile(r"depot[-_]?(?P<depot_id>\d+)", re.IGNORECASE)

DEPOT_NOT_INDEXED = "depot not found in any manifest index"


def find_manifest_files(roots: list[Path]) -> tuple[list[ManifestFile], list[Diagnostic]]:
    files: list[ManifestFile] = []
    diagnostics: list[Diagnostic] = []
    for root in roots:
        if not (directories := depotcache_dirs(root)):
            diagnostics.append(warning(f"No depotcache directory under {root}"))
            continue
        for directory in directories:
            try:
                paths = sorted(directory.glob("*.manifest"), key=lambda p: p.name)
            except OSError as ex:
                diagnostics.append(warning(f"Error reading {directory}: {ex}"))
                continue
            files.extend(ManifestFile(path, path.name, root) for path in paths if is_file(path))
    return files, diagnostics


def extract_manifest_id(filename: str) -> str:
    """Longest run of 10 to 22 digits, the first one on a tie."""
    runs = _MANIFEST_ID.findall(filename)
    return max(runs, key=len) if runs else ""


def extract_depot_id(filename: str) -> str:
    if match := _LEADING_DEPOT_ID.match(filename):
        return match["depot_id"]
    if match := _TAGGED_DEPOT_ID.search(filename):
        return match["depot_id"]
    return ""


def infer_app_id(depot_id: str, ownership: DepotOwnership, options: ResolveOptions) -> str:
    if options.infer_app_id and depot_id and depot_id in ownership:
        return ownership[depot_id]
    return options.default_app_id or ""


def determine_type(depot_id: str, app_id: str, ownership: DepotOwnership, dlc_app_ids: set[str]) -> DepotType:
    if not app_id:
        return "orphan"
    if app_id in dlc_app_ids:
        return "dlc"
    if ownership.get(depot_id) == app_id:
        return "main"
    return "orphan"


def validate(manifest_id: str, depot_id: str, app_id: str, depot_type: DepotType, ownership: DepotOwnership) -> list[str]:
    errors: list[str] = []
    if not _MANIFEST_ID.fullmatch(manifest_id):
        errors.append("Invalid or missing manifest ID")
    if not is_digits(depot_id):
        errors.append("Invalid or missing depot ID")
    if not is_digits(app_id):
        errors.append("Invalid or missing app ID")
    if depot_type == "orphan" and depot_id:
        if depot_id not in ownership:
            errors.append(DEPOT_NOT_INDEXED)
        else:
            # an orphan whose depot is indexed contradicts its own classification
            errors.append(f"depot is indexed under app {ownership[depot_id]} but was classified as orphan")
    return errors


def _record(
    file: ManifestFile,
    ownership: DepotOwnership,
    dlc_app_ids: set[str] | None,
    depot_keys: DepotKeys,
    options: ResolveOptions,
) -> DepotRecord:
    manifest_id = extract_manifest_id(file.filename)
    depot_id = extract_depot_id(file.filename)
    app_id = infer_app_id(depot_id, ownership, options)
    depot_type: DepotType = "unknown" if dlc_app_ids is None else determine_type(depot_id, app_id, ownership, dlc_app_ids)
    errors = validate(manifest_id, depot_id, app_id, depot_type, ownership)
    return DepotRecord(
        path=file.path,
        filename=file.filename,
        depot_id=depot_id,
        manifest_id=manifest_id,
        app_id=app_id,
        decryption_key=depot_keys.get(depot_id) if depot_id else None,
        type=depot_type,
        status="invalid" if errors else "valid",
        validation_errors=tuple(errors),
        root=file.root,
    )


def resolve(
    files: list[ManifestFile],
    ownership: DepotOwnership,
    apps: dict[str, AppIndexEntry],
    depot_keys: DepotKeys,
    options: ResolveOptions = ResolveOptions(),
) -> list[DepotRecord]:
    return [_record(file, ownership, dlc_app_ids(apps), depot_keys, options) for file in files]


def resolve_file(path: Path, ownership: DepotOwnership, options: ResolveOptions = ResolveOptions()) -> DepotRecord:
    """Single manifest file checked against ownership only, its type stays unknown."""
    return _record(ManifestFile(path, path.name), ownership, None, {}, options)
