"""插件生命周期控制：由外部驱动调用 on_start/on_show/on_hide 与 run。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fliprotate.core.config import (
    OutputFormat,
    RunConfig,
    SaveMode,
    Settings,
    parse_format,
    parse_quality,
    parse_save_mode,
)
from fliprotate.core.exceptions import ProcessingBusyError
from fliprotate.core.models import BatchResult
from fliprotate.core.scanner import filter_image_items
from fliprotate.core.settings import SettingsStore
from fliprotate.host.library import HostLibrary
from fliprotate.processing.pipeline import ProgressCallback, run_batch, summarize

LOGGER = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "没有选中任何条目"
NO_IMAGES_MESSAGE = "选中的条目中没有图片文件"


@dataclass(slots=True)
class RunSummary:
    """一次 run 的结果，message 为展示给用户的汇总。"""

    message: str
    result: Optional[BatchResult] = None

    @property
    def has_failures(self) -> bool:
        return self.result is not None and self.result.fail_count > 0


class FlipRotatePlugin:
    """持有设置与图库引用，把一次触发转换为一次批处理。"""

    def __init__(self, library: HostLibrary, settings_store: SettingsStore) -> None:
        self.library = library
        self.settings_store = settings_store
        self.settings = Settings()
        self.visible = False
        self._running = False

    def on_start(self) -> Settings:
        self.settings = self.settings_store.load()
        LOGGER.debug("载入设置：%s", self.settings)
        return self.settings

    def on_show(self) -> None:
        self.visible = True

    def on_hide(self) -> None:
        self.visible = False

    @property
    def format_visible(self) -> bool:
        # 覆盖保存时格式由原文件决定，不提供选择
        return self.settings.save_mode != SaveMode.OVERWRITE.value

    @property
    def quality_visible(self) -> bool:
        return self.settings.format == OutputFormat.JPEG.value

    def update_settings(
        self,
        format: Optional[str] = None,
        quality: Optional[str] = None,
        save_mode: Optional[str] = None,
    ) -> Settings:
        """合并新值后校验并保存，返回生效的设置。"""

        self.settings = Settings(
            format=parse_format(format or self.settings.format).value,
            quality=f"{parse_quality(quality if quality is not None else self.settings.quality):g}",
            save_mode=parse_save_mode(save_mode or self.settings.save_mode).value,
        )
        self.settings_store.save(self.settings)
        return self.settings

    def run(
        self,
        action: str,
        format: Optional[str] = None,
        quality: Optional[str] = None,
        save_mode: Optional[str] = None,
        progress_callback: ProgressCallback = None,
    ) -> RunSummary:
        if self._running:
            raise ProcessingBusyError("上一批任务仍在处理中")

        config = self._build_config(action, format, quality, save_mode)

        selected = self.library.get_selected_items()
        if not selected:
            return RunSummary(message=NO_SELECTION_MESSAGE)
        if not filter_image_items(selected):
            return RunSummary(message=NO_IMAGES_MESSAGE)

        self.settings = config.to_settings()
        self.settings_store.save(self.settings)

        self._running = True
        try:
            result = run_batch(selected, config, self.library, progress_callback)
        finally:
            self._running = False
        return RunSummary(message=summarize(result), result=result)

    def _build_config(
        self,
        action: str,
        format: Optional[str],
        quality: Optional[str],
        save_mode: Optional[str],
    ) -> RunConfig:
        return RunConfig.from_inputs(
            action=action,
            format=format or self.settings.format,
            quality=quality if quality is not None else self.settings.quality,
            save_mode=save_mode or self.settings.save_mode,
        )
