"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from fliprotate.core.config import TransformAction
from fliprotate.core.exceptions import InvalidConfigurationError
from fliprotate.core.progress import ProgressUpdate
from fliprotate.core.report import write_csv_report
from fliprotate.core.scanner import collect_media_items
from fliprotate.core.settings import SettingsStore
from fliprotate.host.library import FolderLibrary
from fliprotate.host.plugin import FlipRotatePlugin
from fliprotate.utils.logging import setup_logging

app = typer.Typer(help="批量翻转/旋转图片并重新编码保存。")

ACTION_HELP = "变换操作：" + " / ".join(a.value for a in TransformAction)


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("处理图片", total=update.total)
        progress.update(task_id, completed=update.completed)

    return callback


@app.command("run")
def run_cli(  # noqa: PLR0913
    action: str = typer.Argument(..., help=ACTION_HELP),
    source: List[Path] = typer.Argument(..., help="源图片文件或目录，可指定多个"),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="新建文件的输出格式 png/jpeg/bmp/webp，默认读取已保存设置"
    ),
    quality: Optional[str] = typer.Option(None, "--quality", "-q", help="JPEG 质量 0~1"),
    save_mode: Optional[str] = typer.Option(None, "--mode", "-m", help="保存方式 overwrite 或 new"),
    library_dir: Path = typer.Option(
        Path("fliprotate_library"), "--library", "-l", help="新建文件登记到的图库目录"
    ),
    temp_dir: Optional[Path] = typer.Option(None, "--temp-dir", help="新建文件的临时目录"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="设置文件路径"),
    report: Optional[Path] = typer.Option(None, "--report", help="写出 CSV 处理报告"),
    allow_recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="是否递归扫描目录"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """对选中的图片执行一次变换并保存。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    sources = [p.expanduser().resolve() for p in source]
    items = collect_media_items(sources, recursive=allow_recursive)
    library = FolderLibrary(
        library_dir.expanduser(),
        selection=items,
        temp_dir=temp_dir.expanduser().resolve() if temp_dir else None,
    )
    plugin = FlipRotatePlugin(library, SettingsStore(settings_file))
    plugin.on_start()

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
    )

    try:
        with progress:
            summary = plugin.run(
                action,
                format=output_format,
                quality=quality,
                save_mode=save_mode,
                progress_callback=_build_progress_callback(progress),
            )
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(summary.message)
    if report and summary.result is not None:
        report_path = write_csv_report(summary.result.outcomes, report.expanduser())
        typer.echo(f"报告文件：{report_path}")

    if summary.has_failures:
        raise typer.Exit(code=1)


@app.command("settings")
def settings_cli(
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="设置文件路径"),
) -> None:
    """显示当前保存的设置。"""

    store = SettingsStore(settings_file)
    current = store.load()
    typer.echo(f"设置文件：{store.path}")
    typer.echo(f"format: {current.format}")
    typer.echo(f"quality: {current.quality}")
    typer.echo(f"saveMode: {current.save_mode}")


if __name__ == "__main__":
    app()
