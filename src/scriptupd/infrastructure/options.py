"""Option storage backed by a pydantic model and an optional JSON file."""

import json
import os
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from scriptupd.config import OptionValues
from scriptupd.domain.protocols import OptionsHook
from scriptupd.logger import get_logger

logger = get_logger("options")


class OptionsStore:
    """Holds the user options and notifies hooks about changes.

    Values are validated by ``OptionValues``. When a path is given, the file
    is read on creation and rewritten after every change.

    Example:
        >>> options = OptionsStore("~/.scriptupd/options.json")
        >>> unhook = options.hook_options(lambda changes: print(changes))
        >>> options.set_option("auto_update", 3)
        {'auto_update': 3.0}
    """

    def __init__(self, path: str | Path | None = None, **initial: Any):
        """
        Initialize the store.

        Args:
            path: JSON file to load from and save to; in memory only when None
            **initial: Values overriding both defaults and the file
        """
        self.path = Path(path).expanduser().resolve() if path is not None else None
        self._values = self._load()
        for name, value in initial.items():
            setattr(self._values, name, value)
        self._hooks: list[OptionsHook] = []

    def get_option(self, name: str) -> Any:
        """
        Return the value of option ``name``.

        Raises:
            KeyError: If there is no such option
        """
        if name not in OptionValues.model_fields:
            raise KeyError(name)
        return getattr(self._values, name)

    def set_option(self, name: str, value: Any) -> None:
        """
        Validate and store ``value``, persist, then call the hooks.

        Raises:
            KeyError: If there is no such option
            ValidationError: If the value is invalid for the option
        """
        if name not in OptionValues.model_fields:
            raise KeyError(name)
        setattr(self._values, name, value)
        self._save()
        changes = {name: getattr(self._values, name)}
        for hook in list(self._hooks):
            try:
                hook(changes)
            except Exception as e:
                logger.error(f"Error in options hook: {e}")

    def hook_options(self, callback: OptionsHook) -> Callable[[], None]:
        """Call ``callback`` after every change; returns a function removing the hook."""
        self._hooks.append(callback)

        def unhook() -> None:
            if callback in self._hooks:
                self._hooks.remove(callback)

        return unhook

    def _load(self) -> OptionValues:
        if self.path is None or not self.path.exists():
            return OptionValues()
        try:
            return OptionValues.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable options file {self.path}: {e}")
            return OptionValues()

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            temp_path.write_text(json.dumps(self._values.model_dump(), indent=2), encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save options to {self.path}: {e}")
            raise IOError(f"Cannot save options: {e}") from e
