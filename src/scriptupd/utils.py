"""
Utility functions shared across scriptupd.
"""

import os
from collections import abc
from pathlib import Path
from typing import Iterable, Optional, TypeVar

T = TypeVar("T")


def get_data_dir() -> str:
    """
    Get the directory holding scriptupd's runtime files (log, options).

    Honours ``SCRIPTUPD_HOME`` and defaults to ``~/.scriptupd``.

    Returns:
        Absolute path to the data directory
    """
    return str(Path(os.getenv("SCRIPTUPD_HOME", "~/.scriptupd")).expanduser().resolve())


def ensure_list(value: "T | Iterable[T] | None") -> list[T]:
    """Wrap a scalar in a list, copy other iterables into one, map None to []."""
    if value is None:
        return []
    if isinstance(value, abc.Iterable) and not isinstance(value, (str, bytes)):
        return list(value)
    return [value]  # type: ignore[list-item]


def true_join(parts: Iterable[Optional[str]], sep: str = "\n") -> str:
    """Join only the truthy strings of ``parts``."""
    return sep.join(part for part in parts if part)
