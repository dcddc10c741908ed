"""Persistent settings for the novelbar reader."""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Optional

from .parser import DEFAULT_HEADING_PATTERN
from .reader import DEFAULT_PAGE_SIZE, NovelReader

logger = logging.getLogger(__name__)

ConfigListener = Callable[["ReaderConfig", set[str]], None]


@dataclass(frozen=True)
class ReaderConfig:
    """Reader settings."""

    heading_pattern: str = DEFAULT_HEADING_PATTERN
    page_size: int = DEFAULT_PAGE_SIZE
    file_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReaderConfig":
        """Create a ReaderConfig from a dictionary, replacing bad values."""
        heading_pattern = data.get("heading_pattern", DEFAULT_HEADING_PATTERN)
        if not isinstance(heading_pattern, str) or not heading_pattern:
            logger.warning("Invalid heading_pattern %r, using default", heading_pattern)
            heading_pattern = DEFAULT_HEADING_PATTERN

        file_path = data.get("file_path")
        if file_path is not None:
            file_path = str(file_path)

        return cls(
            heading_pattern=heading_pattern,
            page_size=coerce_page_size(data.get("page_size", DEFAULT_PAGE_SIZE)),
            file_path=file_path,
        )

    @classmethod
    def load(cls, path: Path) -> "ReaderConfig":
        """
        Read settings from ``path``.

        A damaged file is replaced by its ``.bak`` copy when that one is
        readable; otherwise the defaults apply. A missing file means defaults.
        """
        if not path.exists():
            return cls()

        config = _read_settings(path)
        if config is not None:
            return config

        backup = backup_path_for(path)
        config = _read_settings(backup) if backup.exists() else None
        if config is None:
            return cls()
        logger.warning("Recovered config from backup: %s", backup)
        return config

    def save(self, path: Path) -> None:
        """Write these settings to ``path``; the old file becomes the backup."""
        _write_json_atomically(path, asdict(self))


def coerce_page_size(value: Any) -> int:
    """Return ``value`` as a positive int, or the default page size."""
    try:
        page_size = int(value)
    except (TypeError, ValueError):
        page_size = 0
    if page_size <= 0:
        logger.warning("Invalid page_size %r, using %d", value, DEFAULT_PAGE_SIZE)
        return DEFAULT_PAGE_SIZE
    return page_size


def backup_path_for(path: Path) -> Path:
    """``config.json`` -> ``config.json.bak``."""
    return path.with_name(path.name + ".bak")


def _read_settings(path: Path) -> Optional[ReaderConfig]:
    # None for unreadable files, bad JSON and anything but a JSON object
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load config from %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config in %s: not a JSON object", path)
        return None
    return ReaderConfig.from_dict(data)


def _write_json_atomically(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            json.dump(payload, tmp, indent=2, ensure_ascii=False)
            tmp.flush()
            os.fsync(tmp.fileno())
        if path.exists():
            path.replace(backup_path_for(path))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ConfigManager:
    """Loads, saves and publishes changes to the reader configuration."""

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize config manager.

        Args:
            config_file: Path to config JSON file.
                         Defaults to ~/.novelbar/config.json
        """
        if config_file is None:
            self.config_file = Path.home() / ".novelbar" / "config.json"
        else:
            self.config_file = config_file
        self._config = ReaderConfig.load(self.config_file)
        self._listeners: list[ConfigListener] = []

    @property
    def config(self) -> ReaderConfig:
        return self._config

    def on_change(self, listener: ConfigListener) -> None:
        """
        Register a callback for configuration changes.

        Args:
            listener: Called with the new config and the names of the
                      settings that changed
        """
        self._listeners.append(listener)

    def update(self, **changes: Any) -> set[str]:
        """
        Change, persist and publish settings.

        Args:
            **changes: New values keyed by ReaderConfig field name

        Returns:
            Names of the settings whose value changed

        Raises:
            KeyError: If a key is not a known setting
        """
        known = {f.name for f in fields(ReaderConfig)}
        unknown = set(changes) - known
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        merged = ReaderConfig.from_dict({**asdict(self._config), **changes})
        changed = {
            name
            for name in changes
            if getattr(merged, name) != getattr(self._config, name)
        }
        if not changed:
            return changed

        merged.save(self.config_file)
        self._config = merged
        for listener in self._listeners:
            listener(self._config, changed)
        return changed


def bind_reader(manager: ConfigManager, reader: NovelReader) -> None:
    """
    Keep a NovelReader in sync with configuration changes.

    A new heading pattern re-parses the loaded document; a new page size only
    changes the window length.
    """

    def apply(config: ReaderConfig, changed: set[str]) -> None:
        if "heading_pattern" in changed:
            reader.set_heading_pattern(config.heading_pattern)
        if "page_size" in changed:
            reader.set_page_size(config.page_size)

    manager.on_change(apply)
