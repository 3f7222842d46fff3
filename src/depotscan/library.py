from pathlib import Path

from depotscan import vdf
from depotscan.types import Diagnostic, LibraryListing, TextNode
from depotscan.utils import is_digits, is_dir, is_file, warning

__all__ = [
    "steamapps_dir",
    "library_index_path",
    "config_path",
    "depotcache_dirs",
    "list_content_roots",
]

_DEPOTCACHE_DIRS = (
    Path("depotcache"),
    Path("steamapps") / "depotcache",
    Path("config") / "depotcache",
)


def steamapps_dir(root: Path) -> Path:
    return root / "steamapps"


def library_index_path(primary_root: Path) -> Path:
    return steamapps_dir(primary_root) / "libraryfolders.vdf"


def config_path(primary_root: Path) -> Path:
    return primary_root / "config" / "config.vdf"


def depotcache_dirs(root: Path) -> list[Path]:
    """Existing depotcache directories of a root, Steam and unlockers disagree on where they live."""
    return [root / subdir for subdir in _DEPOTCACHE_DIRS if is_dir(root / subdir)]


def _library_path(entry: str | TextNode) -> str | None:
    # old index files map "1" straight to the path
    if isinstance(entry, str):
        return entry or None
    path = vdf.lookup(entry, "path")
    return path if isinstance(path, str) and path else None


def _resolved(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


def list_content_roots(primary_root: Path) -> LibraryListing:
    roots = [primary_root]
    diagnostics: list[Diagnostic] = []
    seen = {_resolved(primary_root)}

    index_path = library_index_path(primary_root)
    if not is_file(index_path):
        diagnostics.append(warning(f"libraryfolders.vdf not found at: {index_path}"))
        return LibraryListing(roots, diagnostics)
    try:
        tree = vdf.parse_file(index_path)
    except OSError as ex:
        diagnostics.append(warning(f"Failed to read {index_path}: {ex}"))
        return LibraryListing(roots, diagnostics)

    if (folders := vdf.find_node(tree, "libraryfolders")) is None:
        diagnostics.append(warning(f"No libraryfolders entry in {index_path}"))
        return LibraryListing(roots, diagnostics)

    for key, entry in folders.items():
        if not is_digits(key):
            continue
        if (path := _library_path(entry)) is None:
            diagnostics.append(warning(f"Library entry {key} has no path"))
            continue
        library = Path(path)
        try:
            accessible = library.is_dir()
            resolved = library.resolve() if accessible else None
        except OSError as ex:
            diagnostics.append(warning(f"Library path not accessible: {path} ({ex})"))
            continue
        if not accessible:
            diagnostics.append(warning(f"Library path not accessible: {path}"))
            continue
        if resolved not in seen:
            seen.add(resolved)
            roots.append(library)

    return LibraryListing(roots, diagnostics)
