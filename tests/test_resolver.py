from pathlib import Path

import pytest

from depotscan.resolver import (
    DEPOT_NOT_INDEXED,
    determine_type,
    extract_depot_id,
    extract_manifest_id,
    find_manifest_files,
    resolve,
    resolve_file,
)
from depotscan.types import AppIndexEntry, ManifestFile, ResolveOptions

from conftest import KEY_228980, write_cached_manifest

OWNERSHIP = {"228980": "228980", "228982": "228980"}
APPS = {"228980": AppIndexEntry("228980", "Redist", frozenset(OWNERSHIP), frozenset({"329081"}))}


def manifest_file(filename: str) -> ManifestFile:
    return ManifestFile(Path("/steam/depotcache") / filename, filename)


@pytest.mark.parametrize(
    "filename, depot_id, manifest_id",
    [
        ("228980_1234567890123456789.manifest", "228980", "1234567890123456789"),
        ("731_7388888888888888888.manifest", "731", "7388888888888888888"),
        ("depot_12345_9876543210987654321.manifest", "12345", "9876543210987654321"),
        ("456_123_9999999999.manifest", "456", "9999999999"),
        ("Depot-42_backup.manifest", "42", ""),
        ("12345678901_123456789012345.manifest", "12345678901", "123456789012345"),
        ("a1234567890b0987654321.manifest", "", "1234567890"),
        ("notes.manifest", "", ""),
    ],
)
def test_filename_ids(filename, depot_id, manifest_id):
    assert extract_depot_id(filename) == depot_id
    assert extract_manifest_id(filename) == manifest_id


def test_determine_type():
    dlc = {"329081"}
    assert determine_type("228982", "228980", OWNERSHIP, dlc) == "main"
    assert determine_type("329081", "329081", OWNERSHIP, dlc) == "dlc"
    assert determine_type("228982", "", OWNERSHIP, dlc) == "orphan"
    assert determine_type("999", "228980", OWNERSHIP, dlc) == "orphan"


def test_resolve_known_depot():
    [record] = resolve([manifest_file("228980_1234567890123456789.manifest")], OWNERSHIP, APPS, {"228980": KEY_228980})
    assert record.app_id == "228980"
    assert record.type == "main"
    assert record.status == "valid"
    assert record.validation_errors == ()
    assert record.decryption_key == KEY_228980


def test_resolve_unknown_depot():
    [record] = resolve([manifest_file("111_1234567890123456789.manifest")], OWNERSHIP, APPS, {})
    assert record.app_id == ""
    assert record.type == "orphan"
    assert record.status == "invalid"
    assert record.validation_errors == ("Invalid or missing app ID", DEPOT_NOT_INDEXED)
    assert record.decryption_key is None


def test_resolve_malformed_filename():
    [record] = resolve([manifest_file("broken.manifest")], OWNERSHIP, APPS, {})
    assert record.validation_errors == (
        "Invalid or missing manifest ID",
        "Invalid or missing depot ID",
        "Invalid or missing app ID",
    )


def test_default_app_id_for_unknown_depot():
    options = ResolveOptions(default_app_id="329081")
    [record] = resolve([manifest_file("329081_7777777777777777777.manifest")], OWNERSHIP, APPS, {}, options)
    assert record.app_id == "329081"
    assert record.type == "dlc"
    assert record.status == "valid"


def test_orphan_with_indexed_depot_is_flagged():
    options = ResolveOptions(default_app_id="999", infer_app_id=False)
    [record] = resolve([manifest_file("228982_9876543210987654321.manifest")], OWNERSHIP, APPS, {}, options)
    assert record.app_id == "999"
    assert record.type == "orphan"
    assert record.status == "invalid"
    assert record.validation_errors == ("depot is indexed under app 228980 but was classified as orphan",)


def test_resolve_file(tmp_path):
    path = write_cached_manifest(tmp_path, "228982", "9876543210987654321")
    record = resolve_file(path, OWNERSHIP)
    assert record.type == "unknown"
    assert record.app_id == "228980"
    assert record.status == "valid"
    assert record.filename == "228982_9876543210987654321.manifest"


def test_find_manifest_files(tmp_path):
    write_cached_manifest(tmp_path, "228982", "9876543210987654321")
    write_cached_manifest(tmp_path, "228980", "1234567890123456789")
    (tmp_path / "steamapps" / "depotcache" / "readme.txt").write_text("")
    other = tmp_path / "other"
    other.mkdir()

    files, diagnostics = find_manifest_files([tmp_path, other])

    assert [file.filename for file in files] == [
        "228980_1234567890123456789.manifest",
        "228982_9876543210987654321.manifest",
    ]
    assert all(file.root == tmp_path for file in files)
    assert len(diagnostics) == 1
    assert str(other) in str(diagnostics[0])
