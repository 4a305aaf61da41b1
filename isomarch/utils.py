from __future__ import annotations

import os
import re
from typing import Any, Dict, Iterator

_LOGICALS = {".true.": True, ".t.": True, "t": True, ".false.": False, ".f.": False, "f": False}
_INT_RE = re.compile(r"^[+-]?\d+$")


def strip_comment(line: str) -> str:
    # '!' starts a comment unless it sits inside a quoted string.
    quote = None
    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "!":
            return line[:i]
    return line


def _scalar(token: str) -> Any:
    token = token.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        return token[1:-1]
    if token.lower() in _LOGICALS:
        return _LOGICALS[token.lower()]
    if _INT_RE.match(token):
        return int(token)
    try:
        # Fortran double-precision exponent: 1.0d0
        return float(token.replace("d", "e").replace("D", "E"))
    except ValueError as e:
        raise ValueError(f"Could not parse value: {token}") from e


def _value(text: str) -> Any:
    text = text.strip().rstrip(",").strip()
    if text.startswith("(/") and text.endswith("/)"):
        return [_scalar(t) for t in text[2:-2].split(",") if t.strip()]
    return _scalar(text)


def _statements(lines: list[str]) -> Iterator[str]:
    """Yield `key = value` statements; an array `(/ ... /)` may span several lines."""
    pending = ""
    for raw in lines:
        s = strip_comment(raw).strip()
        if not s:
            continue
        pending = f"{pending} {s}" if pending else s
        if pending.count("(/") <= pending.count("/)"):
            yield pending
            pending = ""
    if pending:
        yield pending


def resolve_existing_path(path: str) -> str:
    """Resolve an input given as a bare basename against the repo's examples/ tree."""
    if os.path.exists(path):
        return path

    base = os.path.basename(path)
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    for root in ("examples", os.path.join(repo_root, "examples")):
        if not os.path.isdir(root):
            continue
        for dirpath, _dirnames, filenames in os.walk(root):
            if base in filenames:
                return os.path.join(dirpath, base)
    return path


def parse_namelist(path: str, namelist_name: str = "isomarch_nml") -> Dict[str, Any]:
    """Read `&<namelist_name> ... /` from `path` into a dict with lower-case keys.

    Values are ints, floats, logicals (`.true.`, `T`, ...), quoted strings, or lists of
    those written as `(/ a, b, c /)`.
    """
    path = resolve_existing_path(path)
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        lines = f.read().splitlines()

    start_re = re.compile(r"^\s*&\s*" + re.escape(namelist_name) + r"\b", re.IGNORECASE)
    start = next((i for i, raw in enumerate(lines) if start_re.search(raw)), None)
    if start is None:
        raise ValueError(f"Did not find namelist &{namelist_name} in {path}")

    body: list[str] = []
    for raw in lines[start + 1 :]:
        # Only a standalone '/' (or '&end') closes the group; arrays contain '/' too.
        s = strip_comment(raw).strip()
        if s == "/" or s.lower().replace(" ", "") == "&end":
            break
        body.append(raw)

    out: Dict[str, Any] = {}
    for stmt in _statements(body):
        key, sep, val = stmt.partition("=")
        if sep:
            out[key.strip().lower()] = _value(val)
    return out
