"""Version comparison for userscript versions.

Versions are compared as ``main[-prerelease]``. The main part is compared
numerically dot by dot, treating missing or non-numeric segments as 0. A
version without a pre-release tag is newer than the same version with one.
Pre-release tags are compared semver-style.
"""

import re
from typing import Optional

_VERSION_RE = re.compile(r"^(.*?)-([-.0-9a-z]+)", re.IGNORECASE)
_DIGITS_RE = re.compile(r"^\d+$")
_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")


def compare_version(ver1: Optional[str], ver2: Optional[str]) -> int:
    """Return -1, 0 or 1 as ``ver1`` is older than, equal to or newer than ``ver2``.

    ``None`` compares like an empty string.
    """
    main1, pre1 = _split(ver1 or "")
    main2, pre2 = _split(ver2 or "")
    delta = _compare_chunks(main1, main2)
    if not delta:
        delta = (not pre1) - (not pre2)
    if not delta and pre1:
        delta = _compare_chunks(pre1, pre2, semver=True)
    return -1 if delta < 0 else int(bool(delta))


def _split(version: str) -> tuple[str, str]:
    match = _VERSION_RE.match(version)
    if match:
        return match.group(1), match.group(2)
    return version, ""


def _leading_int(part: str) -> int:
    match = _LEADING_INT_RE.match(part)
    return int(match.group()) if match else 0


def _compare_chunks(ver1: str, ver2: str, semver: bool = False) -> int:
    parts1 = ver1.split(".")
    parts2 = ver2.split(".")
    length = (min if semver else max)(len(parts1), len(parts2))
    for i in range(length):
        a = parts1[i] if i < len(parts1) else ""
        b = parts2[i] if i < len(parts2) else ""
        if semver:
            if _DIGITS_RE.match(a) and _DIGITS_RE.match(b):
                delta = int(a) - int(b)
            else:
                delta = (a > b) - (a < b)
        else:
            delta = _leading_int(a) - _leading_int(b)
        if delta:
            return delta
    return len(parts1) - len(parts2) if semver else 0
