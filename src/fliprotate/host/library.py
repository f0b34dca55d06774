"""宿主图库接口及基于文件夹的实现。"""

from __future__ import annotations

import logging
import shutil
import tempfile
from itertools import count
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable

from fliprotate.core.models import MediaItem

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class HostLibrary(Protocol):
    """流水线依赖的宿主图库能力。"""

    def get_selected_items(self) -> list[MediaItem]:
        """返回当前选中的条目。"""

    def get_temp_directory(self) -> Path:
        """返回可写的临时目录。"""

    def add_item_from_path(self, path: Path) -> bool:
        """把文件登记为图库中的新条目，成功返回 True。"""

    def refresh_item_visuals(self, item_id: str) -> bool:
        """刷新条目的调色板与缩略图，尽力而为。"""


class FolderLibrary:
    """以本地目录充当图库：新增条目即复制文件到根目录。"""

    def __init__(
        self,
        root: Path,
        selection: Iterable[MediaItem] = (),
        temp_dir: Optional[Path] = None,
    ) -> None:
        self.root = root.resolve()
        self.selection = list(selection)
        self.temp_dir = temp_dir or Path(tempfile.gettempdir()) / "fliprotate"
        self.added: list[Path] = []

    def get_selected_items(self) -> list[MediaItem]:
        return list(self.selection)

    def get_temp_directory(self) -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir

    def add_item_from_path(self, path: Path) -> bool:
        self.root.mkdir(parents=True, exist_ok=True)
        destination = _unique_path(self.root / path.name)
        try:
            shutil.copy2(path, destination)
        except OSError as exc:
            LOGGER.error("添加到图库失败：%s -> %s (%s)", path, destination, exc)
            return False
        self.added.append(destination)
        LOGGER.info("已添加到图库：%s", destination)
        return True

    def refresh_item_visuals(self, item_id: str) -> bool:
        item = next((i for i in self.selection if i.id == item_id), None)
        if item is None or not item.file_path.exists():
            return False
        LOGGER.debug("刷新条目缩略图：%s", item.file_path)
        return True


def _unique_path(destination: Path) -> Path:
    if not destination.exists():
        return destination
    for idx in count(1):
        candidate = destination.with_name(f"{destination.stem}_{idx}{destination.suffix}")
        if not candidate.exists():
            return candidate
    return destination
