"""Protocol-independent building blocks: limiter, versions, metadata, URLs."""

from .limiter import ConcurrencyLimiter, limit_concurrency
from .metablock import METABLOCK_RE, ParsedMeta, parse_meta, strip_metablock
from .urls import get_script_update_urls, is_remote, try_url
from .version import compare_version

__all__ = [
    "ConcurrencyLimiter",
    "limit_concurrency",
    "METABLOCK_RE",
    "ParsedMeta",
    "parse_meta",
    "strip_metablock",
    "get_script_update_urls",
    "is_remote",
    "try_url",
    "compare_version",
]
