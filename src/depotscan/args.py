import argparse
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import cast

__all__ = ["Args", "parse_args"]

_parser = argparse.ArgumentParser("depotscan")

_parser.add_argument(
    "steam_path",
    metavar="PATH",
    help="Path to the Steam installation (the directory holding config/ and steamapps/)",
    type=Path,
)

_parser.add_argument(
    "--app",
    metavar="APP-ID",
    help="Show the installed depots of a single app instead of scanning the depotcache",
)

_parser.add_argument(
    "--no-dlc",
    help="With --app, leave out depots classified as DLC",
    action="store_true",
)

_parser.add_argument(
    "--default-appid",
    metavar="APP-ID",
    help="App id given to manifests whose depot is not found in any app manifest",
    default="",
)

_parser.add_argument(
    "--no-infer-appid",
    help="Do not look up the owning app of a depot, always use --default-appid",
    action="store_true",
)

_parser.add_argument(
    "--json",
    help="Print results as JSON",
    action="store_true",
)

_parser.add_argument(
    "-v",
    "--verbose",
    help="Also print informational diagnostics",
    action="store_true",
)


@dataclass
class Args:
    steam_path: Path
    app: str | None
    no_dlc: bool
    default_appid: str
    no_infer_appid: bool
    json: bool
    verbose: bool


def parse_args(argv: Sequence[str] | None = None) -> Args:
    return cast(Args, _parser.parse_args(argv))
