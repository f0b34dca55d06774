"""测试共用的假图库与图片工具。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from fliprotate.core.models import MediaItem


class FakeLibrary:
    """记录调用的内存图库实现。"""

    def __init__(self, temp_dir: Path, selection: Optional[list[MediaItem]] = None) -> None:
        self.temp_dir = temp_dir
        self.selection = selection or []
        self.added: list[Path] = []
        self.added_bytes: list[bytes] = []
        self.refreshed: list[str] = []
        self.add_result = True
        self.refresh_result = True
        self.refresh_error: Optional[Exception] = None
        self.consume_on_add = False

    def get_selected_items(self) -> list[MediaItem]:
        return list(self.selection)

    def get_temp_directory(self) -> Path:
        return self.temp_dir

    def add_item_from_path(self, path: Path) -> bool:
        if not self.add_result:
            return False
        self.added.append(path)
        self.added_bytes.append(path.read_bytes())
        if self.consume_on_add:
            # 模拟宿主把文件移走
            path.unlink()
        return True

    def refresh_item_visuals(self, item_id: str) -> bool:
        if self.refresh_error is not None:
            raise self.refresh_error
        self.refreshed.append(item_id)
        return self.refresh_result


def save_image(path: Path, size: tuple[int, int] = (40, 20), color: str = "blue", fmt: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format=fmt)
    return path


def item_for(path: Path, item_id: str = "1") -> MediaItem:
    return MediaItem(id=item_id, file_path=path, ext=path.suffix.lstrip(".") or None, name=path.name)


@pytest.fixture()
def library(tmp_path: Path) -> FakeLibrary:
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    return FakeLibrary(temp_dir)
