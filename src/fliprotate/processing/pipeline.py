"""批处理协调：筛选条目并按顺序逐个执行处理流程。"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from fliprotate.core.config import RunConfig, SaveMode
from fliprotate.core.models import BatchResult, MediaItem
from fliprotate.core.output_manager import NewFileSaver, OverwriteSaver
from fliprotate.core.progress import ProgressUpdate
from fliprotate.core.scanner import filter_image_items
from fliprotate.host.library import HostLibrary
from fliprotate.processing.worker import Saver, process_item

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def build_saver(save_mode: SaveMode, library: HostLibrary) -> Saver:
    if save_mode is SaveMode.OVERWRITE:
        return OverwriteSaver(library)
    return NewFileSaver(library)


def run_batch(
    items: Iterable[MediaItem],
    config: RunConfig,
    library: HostLibrary,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """批量处理入口。

    条目严格按顺序处理：前一个条目完成（成功或失败）后才开始下一个，
    新建文件模式下的编号因此是确定的。非图片扩展名的条目在开始前被排除，
    不计入成功/失败数。
    """

    items = list(items)
    image_items = filter_image_items(items)
    excluded = len(items) - len(image_items)
    if excluded:
        LOGGER.info("排除 %d 个非图片条目", excluded)

    total = len(image_items)
    result = BatchResult()
    if total == 0:
        _emit_progress(progress_callback, completed=0, total=0, message="没有需要处理的图片")
        return result

    LOGGER.info(
        "开始处理 %d 个条目：%s, 保存方式 %s",
        total,
        config.action.value,
        config.save_mode.value,
    )
    saver = build_saver(config.save_mode, library)
    _emit_progress(progress_callback, 0, total, "开始执行处理任务")

    for completed, item in enumerate(image_items, start=1):
        outcome = process_item(item, config, saver)
        result.outcomes.append(outcome)
        _emit_progress(progress_callback, completed, total, f"完成 {item.display_name}", item.id)

    LOGGER.info("处理完成：成功 %d，失败 %d", result.success_count, result.fail_count)
    return result


def summarize(result: BatchResult) -> str:
    """生成面向用户的单行汇总。"""

    if result.fail_count > 0:
        return f"处理完成：成功 {result.success_count} 张，失败 {result.fail_count} 张。"
    return f"已处理 {result.success_count} 张图片。"


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
    item_id: Optional[str] = None,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, message=message, item_id=item_id))
