"""图片加载实现。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from fliprotate.core.exceptions import ImageLoadError

LOGGER = logging.getLogger(__name__)


def load_image(path: Path) -> Image.Image:
    """加载单张图片并执行 EXIF 旋转校正。

    与转换前的色彩模式保持一致（不做 RGB 归一化），多帧图片只取第一帧。
    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(path) as img:
            img.load()

            # EXIF Orientation 校正，使变换作用于用户看到的方向
            oriented = ImageOps.exif_transpose(img)
            if oriented is None or oriented is img:
                oriented = img.copy()
            return oriented
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageLoadError(f"无法加载图像: {path}") from exc
