"""处理任务的配置模型。"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from fliprotate.core.exceptions import InvalidConfigurationError

LOGGER = logging.getLogger(__name__)


class TransformAction(str, Enum):
    """单次任务执行的几何变换。取值即命令行标识。"""

    FLIP_HORIZONTAL = "flip-horizontal"
    FLIP_VERTICAL = "flip-vertical"
    ROTATE_90 = "rotate-90"
    ROTATE_180 = "rotate-180"
    ROTATE_270 = "rotate-270"


class OutputFormat(str, Enum):
    """新建文件模式下可选的输出格式。"""

    PNG = "png"
    JPEG = "jpeg"
    BMP = "bmp"
    WEBP = "webp"


class SaveMode(str, Enum):
    """保存方式：覆盖原文件或新建文件。"""

    OVERWRITE = "overwrite"
    NEW = "new"


# 覆盖模式下可能出现 gif 等非 OutputFormat 的格式名。
FormatName = Union[OutputFormat, str]

DEFAULT_FORMAT = OutputFormat.WEBP
DEFAULT_QUALITY = "0.9"
DEFAULT_SAVE_MODE = SaveMode.NEW


@dataclass(frozen=True, slots=True)
class Settings:
    """持久化的用户设置，字段保持原始字符串形式。"""

    format: str = DEFAULT_FORMAT.value
    quality: str = DEFAULT_QUALITY
    save_mode: str = DEFAULT_SAVE_MODE.value


@dataclass(frozen=True, slots=True)
class RunConfig:
    """单次运行的不可变配置，构造后在整条流水线中传递。"""

    action: TransformAction
    format: OutputFormat = DEFAULT_FORMAT
    quality: float = float(DEFAULT_QUALITY)
    save_mode: SaveMode = DEFAULT_SAVE_MODE

    @classmethod
    def from_inputs(
        cls,
        action: Union[TransformAction, str],
        format: Union[OutputFormat, str] = DEFAULT_FORMAT,
        quality: Union[float, str, None] = DEFAULT_QUALITY,
        save_mode: Union[SaveMode, str] = DEFAULT_SAVE_MODE,
    ) -> "RunConfig":
        """从界面/命令行传入的原始值构造配置。

        质量参数只在新建 jpeg 文件时严格校验；其它情况下它可能用不到
        （覆盖保存的格式取决于原文件），非法值记录警告后回退到默认值。
        """

        output_format = parse_format(format)
        mode = parse_save_mode(save_mode)
        try:
            quality_value = parse_quality(quality)
        except InvalidConfigurationError:
            if output_format is OutputFormat.JPEG and mode is SaveMode.NEW:
                raise
            LOGGER.warning("忽略无效的质量参数 %r，使用默认值 %s", quality, DEFAULT_QUALITY)
            quality_value = float(DEFAULT_QUALITY)

        return cls(
            action=parse_action(action),
            format=output_format,
            quality=quality_value,
            save_mode=mode,
        )

    def to_settings(self) -> Settings:
        return Settings(
            format=self.format.value,
            quality=_format_quality(self.quality),
            save_mode=self.save_mode.value,
        )


def parse_action(value: Union[TransformAction, str]) -> TransformAction:
    try:
        return TransformAction(value)
    except ValueError as exc:
        choices = ", ".join(a.value for a in TransformAction)
        raise InvalidConfigurationError(f"未知的变换操作: {value}（可选: {choices}）") from exc


def parse_format(value: Union[OutputFormat, str]) -> OutputFormat:
    normalized = value.lower() if isinstance(value, str) else value
    if normalized == "jpg":
        normalized = "jpeg"
    try:
        return OutputFormat(normalized)
    except ValueError as exc:
        choices = ", ".join(f.value for f in OutputFormat)
        raise InvalidConfigurationError(f"未知的输出格式: {value}（可选: {choices}）") from exc


def parse_save_mode(value: Union[SaveMode, str]) -> SaveMode:
    try:
        return SaveMode(value)
    except ValueError as exc:
        raise InvalidConfigurationError(f"未知的保存方式: {value}（可选: overwrite, new）") from exc


def parse_quality(value: Union[float, str, None]) -> float:
    """将质量参数解析为 [0, 1] 区间内的浮点数。"""

    if value is None or value == "":
        return float(DEFAULT_QUALITY)
    try:
        quality = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"质量参数必须为数字: {value!r}") from exc
    if math.isnan(quality) or not 0.0 <= quality <= 1.0:
        raise InvalidConfigurationError(f"质量参数必须位于 0~1 之间: {value!r}")
    return quality


def _format_quality(value: float) -> str:
    # 0.9 -> "0.9"，1.0 -> "1"
    return f"{value:g}"


def coerce_settings(
    format: Optional[str] = None,
    quality: Optional[str] = None,
    save_mode: Optional[str] = None,
) -> Settings:
    """校验各字段，不合法的字段回退到默认值。"""

    defaults = Settings()
    try:
        format_value = parse_format(format).value if format else defaults.format
    except InvalidConfigurationError:
        format_value = defaults.format
    try:
        quality_value = _format_quality(parse_quality(quality)) if quality is not None else defaults.quality
    except InvalidConfigurationError:
        quality_value = defaults.quality
    try:
        save_mode_value = parse_save_mode(save_mode).value if save_mode else defaults.save_mode
    except InvalidConfigurationError:
        save_mode_value = defaults.save_mode
    return Settings(format=format_value, quality=quality_value, save_mode=save_mode_value)
