import errno
import json
import os
import sys
from collections.abc import Sequence

from depotscan.apps import load_app
from depotscan.args import Args, parse_args
from depotscan.scan import scan
from depotscan.types import AppData, Diagnostic, ResolveOptions, ScanResult
from depotscan.utils import is_digits, is_dir


def print_diagnostics(diagnostics: list[Diagnostic], verbose: bool, to_stderr: bool = False):
    for diagnostic in diagnostics:
        if diagnostic.severity == "info" and not verbose:
            continue
        print(f"[{diagnostic.severity}] {diagnostic}", file=sys.stderr if to_stderr else sys.stdout)


def show_scan(result: ScanResult, as_json: bool):
    if as_json:
        print(json.dumps([record._asdict() for record in result.records], default=str, indent=2))
        return
    print(f"Scanned {len(result.roots)} libraries, {len(result.keys)} decryption keys available")
    for record in result.records:
        key_state = "key" if record.decryption_key else "no key"
        print(f"{record.filename}: depot {record.depot_id or '?'} app {record.app_id or '?'} {record.type} {record.status} ({key_state})")
        for message in record.validation_errors:
            print(f"  {message}")
    if result.missing_keys:
        print("Missing decryption keys for the following depots:")
        print(", ".join(result.missing_keys))


def show_app(app: AppData, as_json: bool):
    if as_json:
        content = {
            "app_id": app.app_id,
            "name": app.name,
            "depots": [depot._asdict() for depot in app.depots],
            "missing_keys": app.missing_keys,
        }
        print(json.dumps(content, indent=2))
        return
    print(f'App {app.app_id} "{app.name}"')
    for depot in app.depots:
        print(f"{depot.depot_id};{depot.decryption_key or ''}  manifest {depot.manifest_id or '?'} {depot.type}")
    if app.missing_keys:
        print("Missing decryption keys for the following depots:")
        print(", ".join(app.missing_keys))


def run_app(args: Args) -> int:
    if not is_digits(args.app):
        print(f"Invalid app id: {args.app}")
        return 1
    app = load_app(args.app, args.steam_path, include_dlc=not args.no_dlc)
    print_diagnostics(app.diagnostics, args.verbose, to_stderr=args.json)
    if not app.loaded:
        return 2
    show_app(app, args.json)
    return 0


def run_scan(args: Args) -> int:
    if args.default_appid and not is_digits(args.default_appid):
        print(f"Invalid default app id: {args.default_appid}")
        return 1
    options = ResolveOptions(default_app_id=args.default_appid, infer_app_id=not args.no_infer_appid)
    result = scan(args.steam_path, options)
    print_diagnostics(result.diagnostics, args.verbose, to_stderr=args.json)
    if not result.roots:
        return 2
    show_scan(result, args.json)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if not is_dir(args.steam_path):
        print(OSError(errno.ENOENT, os.strerror(errno.ENOENT), str(args.steam_path)))
        return 1
    if args.app is not None:
        return run_app(args)
    return run_scan(args)


if __name__ == "__main__":
    sys.exit(main())
