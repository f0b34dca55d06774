"""输出写入与冲突处理模块：覆盖保存与新建文件两种策略。"""

from __future__ import annotations

import logging
import shutil
import uuid
from itertools import count
from pathlib import Path
from typing import Set

from fliprotate.core.config import FormatName, OutputFormat, SaveMode
from fliprotate.core.exceptions import LibraryAddError, WriteError
from fliprotate.core.models import MediaItem, SavedLocation
from fliprotate.host.library import HostLibrary

LOGGER = logging.getLogger(__name__)

EXTENSION_FORMATS = {
    "jpg": OutputFormat.JPEG,
    "jpeg": OutputFormat.JPEG,
    "png": OutputFormat.PNG,
    "webp": OutputFormat.WEBP,
    "bmp": OutputFormat.BMP,
}


def resolve_overwrite_format(item: MediaItem) -> FormatName:
    """覆盖保存时沿用原文件的容器格式，忽略用户选择。

    无法识别的扩展名原样返回，缺失扩展名时回退到 webp。
    """

    ext = item.extension
    if ext in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[ext]
    return ext or OutputFormat.WEBP


def format_name(value: FormatName) -> str:
    return value.value if isinstance(value, OutputFormat) else str(value).lower()


def write_bytes(data: bytes, destination: Path) -> None:
    """写入字节数据，先落到同目录临时文件再替换目标。"""

    tmp = destination.with_name(f".{destination.stem}.tmp-{uuid.uuid4().hex[:8]}{destination.suffix}")
    try:
        tmp.write_bytes(data)
        if destination.exists():
            # 覆盖时保留原文件权限
            shutil.copymode(destination, tmp)
        tmp.replace(destination)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise WriteError(f"写入文件失败: {destination} ({exc})") from exc


class OverwriteSaver:
    """覆盖原文件，并通知宿主刷新缩略图。"""

    mode = SaveMode.OVERWRITE

    def __init__(self, library: HostLibrary) -> None:
        self.library = library

    def save(self, data: bytes, item: MediaItem) -> SavedLocation:
        destination = item.file_path
        write_bytes(data, destination)
        self._refresh(item)
        return SavedLocation(
            path=destination,
            mode=self.mode,
            format=format_name(resolve_overwrite_format(item)),
        )

    def _refresh(self, item: MediaItem) -> None:
        try:
            refreshed = self.library.refresh_item_visuals(item.id)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("刷新条目失败 %s: %s", item.display_name, exc)
            return
        if refreshed is False:
            LOGGER.warning("刷新条目失败 %s", item.display_name)


class NewFileSaver:
    """在临时目录生成不冲突的新文件，登记到图库后删除临时文件。"""

    mode = SaveMode.NEW

    def __init__(self, library: HostLibrary) -> None:
        self.library = library
        self._reserved: Set[Path] = set()

    def decide_destination(self, item: MediaItem, output_format: FormatName) -> Path:
        """根据临时目录现有文件决定输出路径，每个条目单独判断。"""

        temp_dir = Path(self.library.get_temp_directory())
        try:
            temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"无法创建临时目录: {temp_dir} ({exc})") from exc

        stem = item.file_path.stem
        suffix = "." + format_name(output_format)
        destination = temp_dir / f"{stem}{suffix}"
        if not self._is_taken(destination):
            return destination

        for idx in count(1):
            candidate = temp_dir / f"{stem}_{idx}{suffix}"
            if not self._is_taken(candidate):
                return candidate

        # 理论上不会执行到此处
        return destination

    def save(self, data: bytes, item: MediaItem, output_format: FormatName) -> SavedLocation:
        destination = self.decide_destination(item, output_format)
        self._reserved.add(destination)
        write_bytes(data, destination)

        try:
            added = self.library.add_item_from_path(destination)
        except Exception as exc:  # noqa: BLE001
            raise LibraryAddError(f"添加到图库失败: {destination} ({exc})") from exc
        if added is False:
            raise LibraryAddError(f"添加到图库失败: {destination}")

        _remove_temp_file(destination)
        return SavedLocation(path=destination, mode=self.mode, format=format_name(output_format))

    def _is_taken(self, path: Path) -> bool:
        return path.exists() or path in self._reserved


def _remove_temp_file(path: Path) -> None:
    # 图库已接收数据，删除失败只记录警告
    try:
        path.unlink()
    except OSError as exc:
        LOGGER.warning("删除临时文件失败 %s: %s", path, exc)
