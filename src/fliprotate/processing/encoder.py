"""图像编码：格式映射与各格式的质量策略。"""

from __future__ import annotations

import io
import logging
from typing import Any, Optional

from PIL import Image

from fliprotate.core.config import FormatName, OutputFormat
from fliprotate.core.exceptions import EncodeError

LOGGER = logging.getLogger(__name__)

# 无透明通道的格式，写出前需要与白色背景合成
OPAQUE_FORMATS = {"JPEG", "BMP"}

NATIVE_MODES = {
    "JPEG": {"L", "RGB", "CMYK"},
    "BMP": {"1", "L", "P", "RGB"},
    "PNG": {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"},
    "WEBP": {"RGB", "RGBA"},
}


def resolve_quality(output_format: FormatName, quality: Optional[float]) -> Optional[float]:
    """返回编码器实际使用的质量参数。

    - jpeg：使用用户给定的值（0~1）
    - webp：固定为 1.0，忽略用户值
    - png / bmp 及其它格式：无质量参数
    """

    name = _format_key(output_format)
    if name == OutputFormat.JPEG.value:
        return float(quality) if quality is not None else None
    if name == OutputFormat.WEBP.value:
        return 1.0
    return None


def pil_format_for(output_format: FormatName) -> str:
    """将格式名映射为 Pillow 的格式标识，未知格式回退到 WEBP。"""

    name = _format_key(output_format)
    pil_format = Image.registered_extensions().get(f".{name}")
    if pil_format and pil_format in Image.SAVE:
        return pil_format
    LOGGER.warning("无法识别的输出格式 %s，改用 WEBP", name)
    return "WEBP"


def encode(image: Image.Image, output_format: FormatName, quality: Optional[float] = None) -> bytes:
    """把图像编码为目标格式的字节串。"""

    pil_format = pil_format_for(output_format)
    quality_value = resolve_quality(output_format, quality)
    prepared = _prepare_mode(image, pil_format)
    try:
        data = _write_to_buffer(prepared, pil_format, quality_value)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"编码失败（{pil_format}）: {exc}") from exc
    finally:
        if prepared is not image:
            prepared.close()

    if not data:
        raise EncodeError(f"编码器没有输出数据（{pil_format}）")
    return data


def _write_to_buffer(image: Image.Image, pil_format: str, quality: Optional[float]) -> bytes:
    save_params: dict[str, Any] = {}
    if quality is not None:
        save_params["quality"] = _pillow_quality(quality)
    buffer = io.BytesIO()
    image.save(buffer, format=pil_format, **save_params)
    return buffer.getvalue()


def _pillow_quality(quality: float) -> int:
    """0~1 的质量映射为 Pillow 的 1~100。"""

    return max(1, min(100, int(round(quality * 100))))


def _prepare_mode(image: Image.Image, pil_format: str) -> Image.Image:
    """转换到目标格式可写出的色彩模式。"""

    native = NATIVE_MODES.get(pil_format)
    if native is None:
        return image

    if pil_format in OPAQUE_FORMATS and _has_alpha(image):
        return _flatten_on_white(image)
    if image.mode in native:
        return image
    if pil_format in OPAQUE_FORMATS:
        return image.convert("RGB")
    return image.convert("RGBA" if _has_alpha(image) else "RGB")


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in {"RGBA", "LA", "PA"} or (image.mode == "P" and "transparency" in image.info)


def _flatten_on_white(image: Image.Image) -> Image.Image:
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.split()[-1])
    rgba.close()
    return background


def _format_key(output_format: FormatName) -> str:
    if isinstance(output_format, OutputFormat):
        return output_format.value
    name = str(output_format).lower().lstrip(".")
    return "jpeg" if name == "jpg" else name
