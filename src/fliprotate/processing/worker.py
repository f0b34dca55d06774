"""单个条目的处理单元：解码 → 变换 → 编码 → 保存。"""

from __future__ import annotations

import logging
from typing import Optional, Union

from PIL import Image

from fliprotate.core.config import RunConfig, SaveMode
from fliprotate.core.exceptions import (
    EncodeError,
    FliprotateError,
    ImageLoadError,
    LibraryAddError,
    WriteError,
)
from fliprotate.core.models import ItemOutcome, MediaItem
from fliprotate.core.output_manager import NewFileSaver, OverwriteSaver, resolve_overwrite_format
from fliprotate.processing.encoder import encode
from fliprotate.processing.image_loader import load_image
from fliprotate.processing.transform import transform

LOGGER = logging.getLogger(__name__)

Saver = Union[OverwriteSaver, NewFileSaver]


def process_item(item: MediaItem, config: RunConfig, saver: Saver) -> ItemOutcome:
    """执行单个条目的完整流程，任何阶段的错误都转换为失败结果。"""

    image: Optional[Image.Image] = None
    oriented: Optional[Image.Image] = None

    # 覆盖保存必须在编码前确定格式，且只看原文件扩展名
    if config.save_mode is SaveMode.OVERWRITE:
        output_format = resolve_overwrite_format(item)
    else:
        output_format = config.format

    try:
        image = load_image(item.file_path)
        oriented = transform(image, config.action).image
        data = encode(oriented, output_format, config.quality)
        if isinstance(saver, OverwriteSaver):
            location = saver.save(data, item)
        else:
            location = saver.save(data, item, output_format)
    except FliprotateError as exc:
        LOGGER.error("处理失败 %s: %s", item.file_path, exc)
        return ItemOutcome(
            item=item,
            success=False,
            result_path=item.file_path,
            error_message=str(exc),
            status=f"error-{_stage_of(exc)}",
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("处理时出现未预期的异常 %s", item.file_path)
        return ItemOutcome(
            item=item,
            success=False,
            result_path=item.file_path,
            error_message=str(exc) or exc.__class__.__name__,
            status="error-unexpected",
        )
    finally:
        _close_if_needed(image, oriented)

    LOGGER.info("已处理 %s -> %s", item.display_name, location.path)
    return ItemOutcome(
        item=item,
        success=True,
        result_path=location.path,
        status=f"processed-{location.mode.value}",
    )


STAGES = (
    (ImageLoadError, "load"),
    (EncodeError, "encode"),
    (WriteError, "write"),
    (LibraryAddError, "library"),
)


def _stage_of(exc: FliprotateError) -> str:
    for error_type, stage in STAGES:
        if isinstance(exc, error_type):
            return stage
    return "config"


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
