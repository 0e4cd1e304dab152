from __future__ import annotations
"""Persistent defaults for ss3 commands."""

from dataclasses import dataclass, field
import json
import os
from pathlib import Path

from .models import OverwriteMode

SETTINGS_ENV = "SS3_SETTINGS"
DEFAULT_DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _default_ignore_names() -> list[str]:
    return [".DS_Store"]


@dataclass
class AppSettings:
    """Simple container for persistent app settings."""

    overwrite_mode: str = OverwriteMode.SKIP.value
    show_skipped: bool = False
    ignore_upload_names: list[str] = field(default_factory=_default_ignore_names)
    download_chunk_size: int = DEFAULT_DOWNLOAD_CHUNK_SIZE

    @property
    def default_overwrite_mode(self) -> OverwriteMode:
        return OverwriteMode.parse(self.overwrite_mode)


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = os.environ.get(SETTINGS_ENV) or Path.home() / ".ss3_settings.json"
        self._path = Path(storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        overwrite_mode = data.get("overwrite_mode", AppSettings.overwrite_mode)
        try:
            overwrite_value = OverwriteMode.parse(overwrite_mode).value
        except ValueError:
            overwrite_value = AppSettings.overwrite_mode

        show_skipped = data.get("show_skipped", AppSettings.show_skipped)
        if not isinstance(show_skipped, bool):
            show_skipped = AppSettings.show_skipped

        ignore_names = data.get("ignore_upload_names")
        if isinstance(ignore_names, list) and all(isinstance(name, str) for name in ignore_names):
            ignore_value = [name for name in ignore_names if name]
        else:
            ignore_value = _default_ignore_names()

        chunk_size = data.get("download_chunk_size", AppSettings.download_chunk_size)
        try:
            chunk_value = int(chunk_size)
        except (TypeError, ValueError):
            chunk_value = AppSettings.download_chunk_size
        if chunk_value <= 0:
            chunk_value = AppSettings.download_chunk_size

        return AppSettings(
            overwrite_mode=overwrite_value,
            show_skipped=show_skipped,
            ignore_upload_names=ignore_value,
            download_chunk_size=chunk_value,
        )

    def save(self, settings: AppSettings) -> None:
        payload = {
            "overwrite_mode": OverwriteMode.parse(settings.overwrite_mode).value,
            "show_skipped": bool(settings.show_skipped),
            "ignore_upload_names": [name for name in settings.ignore_upload_names if name],
            "download_chunk_size": max(int(settings.download_chunk_size), 1),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
