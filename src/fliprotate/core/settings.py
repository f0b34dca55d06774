"""用户设置的持久化：JSON 文件形式的简单键值存储。"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from fliprotate.core.config import Settings, coerce_settings

LOGGER = logging.getLogger(__name__)

APP_DIR_NAME = "fliprotate"
SETTINGS_FILENAME = "settings.json"


def default_settings_path() -> Path:
    """返回当前平台下默认的 settings.json 路径。"""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / APP_DIR_NAME / SETTINGS_FILENAME
        return Path.home() / "AppData" / "Roaming" / APP_DIR_NAME / SETTINGS_FILENAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME / SETTINGS_FILENAME
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME / SETTINGS_FILENAME
    return Path.home() / ".config" / APP_DIR_NAME / SETTINGS_FILENAME


class SettingsStore:
    """读写 {format, quality, saveMode} 三个设置项。

    读取失败（文件缺失、无法解析、字段非法）时不抛异常，
    而是回退到默认值 ``{"format": "webp", "quality": "0.9", "saveMode": "new"}``。
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or default_settings_path()

    def load(self) -> Settings:
        if not self.path.exists():
            return Settings()

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.error("读取设置失败，使用默认值：%s", exc)
            return Settings()

        if not isinstance(payload, dict):
            LOGGER.error("设置文件内容不是对象，使用默认值：%s", self.path)
            return Settings()

        quality = payload.get("quality")
        return coerce_settings(
            format=_as_str(payload.get("format")),
            quality=None if quality is None else str(quality),
            save_mode=_as_str(payload.get("saveMode")),
        )

    def save(self, settings: Settings) -> None:
        payload = {
            "format": settings.format,
            "quality": settings.quality,
            "saveMode": settings.save_mode,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _as_str(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None
