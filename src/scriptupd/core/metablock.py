"""Parser for the ``// ==UserScript==`` metadata block of a script."""

import re
from dataclasses import dataclass

from scriptupd.domain.types import ScriptMeta
from scriptupd.errors import MetaParseError

METABLOCK_RE = re.compile(
    r"((?:^|\n)\s*//\x20==UserScript==([\s\S]*?\n)\s*//\x20==/UserScript==)([ \t]*(?:\r?\n|$))?"
)
_META_LINE_RE = re.compile(r"^\s*//\s*@([\w:-]+)(?:[ \t]+(.*?))?\s*$", re.MULTILINE)


@dataclass
class ParsedMeta:
    """Result of ``parse_meta``: the values and the raw block they came from."""

    meta: ScriptMeta
    raw: str = ""


def parse_meta(code: str, permissive: bool = False) -> ParsedMeta:
    """
    Parse the metadata block of ``code``.

    Args:
        code: Full script, or a metadata-only response of a smart server
        permissive: Return empty metadata instead of raising when no block is found

    Returns:
        ParsedMeta with the declared values and the matched block text

    Raises:
        MetaParseError: If no block is found and ``permissive`` is False
    """
    match = METABLOCK_RE.search(code or "")
    if not match:
        if permissive:
            return ParsedMeta(ScriptMeta())
        raise MetaParseError("Invalid script: no ==UserScript== block found")

    meta = ScriptMeta()
    for key, value in _META_LINE_RE.findall(match.group(2)):
        value = value.strip()
        if key == "name":
            meta.name = meta.name or value
        elif key == "version":
            meta.version = value or None
        elif key == "namespace":
            meta.namespace = value
        elif key == "downloadURL":
            meta.download_url = value or None
        elif key == "updateURL":
            meta.update_url = value or None
        elif key == "require" and value:
            meta.requires.append(value)
        elif key == "resource" and value:
            name, _, url = value.partition(" ")
            if url.strip():
                meta.resources[name] = url.strip()
    return ParsedMeta(meta, match.group(1))


def strip_metablock(code: str) -> str:
    """Return ``code`` without its first metadata block."""
    return METABLOCK_RE.sub("", code or "", count=1)
