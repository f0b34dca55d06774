"""图片条目的筛选与文件扫描逻辑。"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence

from fliprotate.core.models import MediaItem

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "bmp", "gif"})


def is_image_item(item: MediaItem) -> bool:
    return item.extension in IMAGE_EXTENSIONS


def filter_image_items(items: Iterable[MediaItem]) -> list[MediaItem]:
    """保留扩展名属于支持列表的条目，保持原有顺序。"""

    return [item for item in items if is_image_item(item)]


def _iter_candidate_files(path: Path, recursive: bool) -> Iterator[Path]:
    """遍历路径下的所有文件。"""

    if path.is_file():
        yield path
        return

    if not path.is_dir():
        return

    iterator = path.rglob("*") if recursive else path.glob("*")
    for candidate in sorted(iterator, key=lambda p: str(p).lower()):
        if candidate.is_file():
            yield candidate


def collect_media_items(sources: Sequence[Path], recursive: bool = True) -> list[MediaItem]:
    """把命令行给出的文件/目录展开为 MediaItem 列表（不做扩展名筛选）。"""

    collected: list[MediaItem] = []
    seen_paths: set[Path] = set()

    for root in sources:
        for candidate in _iter_candidate_files(root.resolve(), recursive):
            if candidate in seen_paths:
                continue
            seen_paths.add(candidate)
            collected.append(
                MediaItem(
                    id=str(len(collected) + 1),
                    file_path=candidate,
                    ext=candidate.suffix.lstrip(".") or None,
                    name=candidate.name,
                )
            )

    return collected
