"""Tolerant reader for Steam's KeyValues text files (.vdf, .acf).

Only the subset Steam writes for config.vdf, libraryfolders.vdf and
appmanifest_*.acf is understood. Nothing here raises on malformed content:
unbalanced braces and unknown tokens are skipped, and whatever could be read
is returned. Escape sequences are not interpreted, so a Windows path keeps its
doubled backslashes.
"""

import re
from collections.abc import Sequence
from pathlib import Path

from depotscan.types import TextNode
from depotscan.utils import read_text

__all__ = ["parse", "parse_file", "lookup", "find_node", "find_path", "child_nodes"]

_KEY_VALUE = re.compile(r'"([^"]+)"\s+"([^"]*)"')
_KEY = re.compile(r'"([^"]+)"')


def parse(text: str) -> TextNode:
    root: TextNode = {}
    # open nodes, innermost last
    stack: list[TextNode] = [root]
    pending: str | None = None

    for line in text.splitlines():
        rest = line.strip()
        while rest and not rest.startswith("//"):
            if rest[0] == "{":
                # a brace with no key in front of it opens nothing
                if pending is not None:
                    child: TextNode = {}
                    stack[-1][pending] = child
                    stack.append(child)
                pending = None
                rest = rest[1:]
            elif rest[0] == "}":
                if len(stack) > 1:
                    stack.pop()
                pending = None
                rest = rest[1:]
            elif match := _KEY_VALUE.match(rest):
                stack[-1][match[1]] = match[2]
                pending = None
                rest = rest[match.end() :]
            elif match := _KEY.match(rest):
                pending = match[1]
                rest = rest[match.end() :]
            else:
                # conditionals like [$WIN32] and other noise
                break
            rest = rest.lstrip()

    return root


def parse_file(path: Path) -> TextNode:
    return parse(read_text(path))  # raises OSError


def lookup(node: TextNode, *candidates: str) -> str | TextNode | None:
    """Value of the first candidate key present in ``node``.

    Candidates are tried in order as exact keys, then once more ignoring case.
    """
    for candidate in candidates:
        if candidate in node:
            return node[candidate]
    folded = [candidate.casefold() for candidate in candidates]
    by_folded_key = {key.casefold(): value for key, value in node.items()}
    for candidate in folded:
        if candidate in by_folded_key:
            return by_folded_key[candidate]
    return None


def find_node(node: TextNode, *candidates: str) -> TextNode | None:
    value = lookup(node, *candidates)
    return value if isinstance(value, dict) else None


def find_path(node: TextNode, path: Sequence[str]) -> TextNode | None:
    current: TextNode | None = node
    for segment in path:
        if current is None:
            return None
        current = find_node(current, segment)
    return current


def child_nodes(node: TextNode) -> dict[str, TextNode]:
    return {key: value for key, value in node.items() if isinstance(value, dict)}
