import json

from depotscan import main

from conftest import KEY_228980


def test_scan_output(steam_root, capsys):
    assert main([str(steam_root)]) == 0
    out = capsys.readouterr().out
    assert "228980_1234567890123456789.manifest: depot 228980 app 228980 main valid (key)" in out
    assert "329081_7777777777777777777.manifest: depot 329081 app ? orphan invalid (no key)" in out
    assert out.rstrip().endswith("228990")


def test_scan_json(steam_root, capsys):
    assert main([str(steam_root), "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [row["depot_id"] for row in rows] == ["228980", "228982", "228990", "329081"]
    assert rows[0]["decryption_key"] == KEY_228980


def test_app_json(steam_root, capsys):
    assert main([str(steam_root), "--app", "228980", "--json"]) == 0
    captured = capsys.readouterr()
    content = json.loads(captured.out)
    assert content["name"] == "Steamworks Common Redistributables"
    assert content["missing_keys"] == ["228990"]
    assert "No decryption key found for depot 228990" in captured.err


def test_bad_arguments(steam_root, tmp_path, capsys):
    assert main([str(tmp_path / "missing")]) == 1
    assert main([str(steam_root), "--app", "abc"]) == 1
    assert main([str(steam_root), "--default-appid", "x1"]) == 1
    assert main([str(steam_root), "--app", "440"]) == 2
    assert "App manifest not found for app ID 440" in capsys.readouterr().out
