"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from fliprotate.core.models import ItemOutcome

HEADER = ["item_id", "source_path", "output_path", "status", "message"]


def write_csv_report(outcomes: Iterable[ItemOutcome], report_path: Path) -> Path:
    """将处理结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    record.item.id,
                    str(record.source_path),
                    str(record.result_path) if record.result_path else "",
                    record.status,
                    record.error_message or "",
                ]
            )
    return report_path
