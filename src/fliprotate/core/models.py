"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from fliprotate.core.config import SaveMode


@dataclass(frozen=True, slots=True)
class MediaItem:
    """宿主图库中的一个条目，对流水线而言只读。"""

    id: str
    file_path: Path
    ext: Optional[str] = None
    name: Optional[str] = None

    @property
    def extension(self) -> str:
        """小写、不带点的扩展名；无法确定时返回空字符串。

        优先使用 ext，其次取 name 最后一个点之后的部分（name 不含点时即整个 name），
        两者都缺失时才看文件路径的后缀。
        """

        if self.ext:
            return self.ext.lower().lstrip(".")
        if self.name:
            return self.name.rsplit(".", 1)[-1].lower()
        return self.file_path.suffix.lower().lstrip(".")

    @property
    def display_name(self) -> str:
        return self.name or self.file_path.name


@dataclass(slots=True)
class SavedLocation:
    """保存策略的写入结果。"""

    path: Path
    mode: SaveMode
    format: str


@dataclass(slots=True)
class ItemOutcome:
    """记录单个条目的处理结果（用于汇总/报告）。"""

    item: MediaItem
    success: bool
    result_path: Optional[Path] = None
    error_message: Optional[str] = None
    status: str = "processed"

    @property
    def source_path(self) -> Path:
        return self.item.file_path


@dataclass(slots=True)
class BatchResult:
    """一次批处理的全部结果。"""

    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def fail_count(self) -> int:
        return len(self.outcomes) - self.success_count
