"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息。completed 为已结束（含失败）的条目数。"""

    total: int
    completed: int
    message: Optional[str] = None
    item_id: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.completed >= self.total
