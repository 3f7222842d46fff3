from pathlib import Path

from depotscan.index import build_index
from depotscan.keys import read_keys
from depotscan.library import config_path, list_content_roots
from depotscan.resolver import find_manifest_files, resolve
from depotscan.types import Diagnostic, ResolveOptions, ScanResult
from depotscan.utils import error, is_dir, unique

__all__ = ["scan"]


def scan(primary_root: Path, options: ResolveOptions = ResolveOptions()) -> ScanResult:
    """Every cached manifest under every library of a Steam installation.

    Nothing found in one file or one library stops the scan, only a missing
    Steam installation does.
    """
    if not is_dir(primary_root):
        return ScanResult([], [], {}, [], [error(f"Steam installation not found at: {primary_root}")])

    diagnostics: list[Diagnostic] = []

    listing = list_content_roots(primary_root)
    diagnostics.extend(listing.diagnostics)

    index = build_index(listing.roots)
    diagnostics.extend(index.diagnostics)

    resolution = read_keys(config_path(primary_root))
    diagnostics.extend(resolution.diagnostics)

    files, file_diagnostics = find_manifest_files(listing.roots)
    diagnostics.extend(file_diagnostics)

    records = resolve(files, index.ownership, index.apps, resolution.keys, options)
    missing_keys = unique([record.depot_id for record in records if record.depot_id and record.type != "orphan" and record.decryption_key is None])

    return ScanResult(listing.roots, records, resolution.keys, missing_keys, diagnostics)
