"""几何变换：水平/垂直翻转与 90 度倍数的顺时针旋转。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from fliprotate.core.config import TransformAction
from fliprotate.core.exceptions import InvalidConfigurationError

# 以输出画布中心为原点做镜像/旋转。旋转方向为屏幕坐标系下的顺时针，
# 而 Pillow 的 ROTATE_* 为逆时针，因此 90 与 270 对调。
TRANSPOSE_METHODS = {
    TransformAction.FLIP_HORIZONTAL: Image.Transpose.FLIP_LEFT_RIGHT,
    TransformAction.FLIP_VERTICAL: Image.Transpose.FLIP_TOP_BOTTOM,
    TransformAction.ROTATE_90: Image.Transpose.ROTATE_270,
    TransformAction.ROTATE_180: Image.Transpose.ROTATE_180,
    TransformAction.ROTATE_270: Image.Transpose.ROTATE_90,
}

SWAPS_DIMENSIONS = frozenset({TransformAction.ROTATE_90, TransformAction.ROTATE_270})


@dataclass(slots=True)
class TransformedImage:
    """变换后的图像及其输出尺寸。"""

    image: Image.Image
    width: int
    height: int


def output_size(action: TransformAction, size: Tuple[int, int]) -> Tuple[int, int]:
    """旋转 90/270 度时宽高互换，其余操作尺寸不变。"""

    width, height = size
    if action in SWAPS_DIMENSIONS:
        return height, width
    return width, height


def transform(image: Image.Image, action: TransformAction) -> TransformedImage:
    """对图像执行单个变换。像素逐一映射，不做重采样。"""

    method = TRANSPOSE_METHODS.get(action)
    if method is None:
        raise InvalidConfigurationError(f"未知的变换操作: {action}")

    oriented = image.transpose(method)
    width, height = output_size(action, image.size)
    return TransformedImage(image=oriented, width=width, height=height)
