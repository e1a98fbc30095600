"""User settings and change notification.

Settings are owned by an external store (the JSON file written by
`udt settings`, or whatever host embeds the engine). The engine only reads
them through a `SettingsHolder`, which is reloaded on change and notifies
subscribers so caches can be invalidated.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable

from udt.core.languages import DEFAULT_TARGET_LANGUAGE
from udt.utils.console import console


@dataclass(frozen=True)
class Settings:
    """Process-wide user settings, treated as read-only by the engine."""

    enabled: bool = True
    target_language: str = DEFAULT_TARGET_LANGUAGE
    preserve_terms: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "targetLanguage": self.target_language,
            "preserveTerms": list(self.preserve_terms),
        }

    @classmethod
    def from_dict(cls, data: dict, defaults: Settings | None = None) -> Settings:
        """Build settings from the stored camelCase shape, filling gaps from defaults."""
        base = defaults or cls()
        terms = data.get("preserveTerms", base.preserve_terms)
        if not isinstance(terms, (list, tuple)):
            terms = base.preserve_terms
        enabled = data.get("enabled", base.enabled)
        if not isinstance(enabled, bool):
            enabled = base.enabled
        return cls(
            enabled=enabled,
            target_language=str(data.get("targetLanguage") or base.target_language),
            preserve_terms=tuple(str(t) for t in terms if str(t).strip()),
        )


SettingsListener = Callable[[Settings], None]


class SettingsHolder:
    """Holds the current settings and notifies listeners on reload."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._listeners: list[SettingsListener] = []

    @property
    def current(self) -> Settings:
        return self._settings

    def on_change(self, listener: SettingsListener) -> None:
        """Register a callback invoked with the new settings after each reload."""
        self._listeners.append(listener)

    def reload(self, settings: Settings) -> None:
        """Replace the current settings and notify listeners."""
        self._settings = settings
        for listener in self._listeners:
            listener(settings)

    def update(self, **changes: object) -> Settings:
        """Apply field changes on top of the current settings and reload."""
        updated = replace(self._settings, **changes)
        self.reload(updated)
        return updated


class SettingsFile:
    """JSON-file settings store.

    Stored shape: {"enabled": bool, "targetLanguage": str, "preserveTerms": [str]}.
    """

    def __init__(self, path: Path, defaults: Settings | None = None) -> None:
        self.path = Path(path)
        self.defaults = defaults or Settings()

    def read(self) -> Settings:
        if not self.path.is_file():
            return self.defaults
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return self.defaults
        if not isinstance(data, dict):
            return self.defaults
        return Settings.from_dict(data, self.defaults)

    def write(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(settings.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
        )

    def sync(self, holder: SettingsHolder) -> Settings:
        """Reload the holder from disk, notifying its listeners."""
        settings = self.read()
        holder.reload(settings)
        return settings

    def stamp(self) -> tuple[int, int] | None:
        """(mtime_ns, size) of the file, or None when it does not exist."""
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, stat.st_size

    async def watch(self, holder: SettingsHolder, interval: float = 1.0) -> None:
        """Sync the holder each time the file changes on disk. Runs until cancelled."""
        last = self.stamp()
        while True:
            await asyncio.sleep(interval)
            current = self.stamp()
            if current == last:
                continue
            last = current
            settings = self.sync(holder)
            console.print(
                f"[dim]Settings reloaded:[/dim] {settings.target_language}, "
                f"{'enabled' if settings.enabled else 'disabled'}, "
                f"{len(settings.preserve_terms)} preserve terms"
            )
