"""覆盖保存与新建文件两种策略的测试。"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import pytest

from conftest import FakeLibrary, item_for, save_image
from fliprotate.core.config import OutputFormat, SaveMode
from fliprotate.core.exceptions import LibraryAddError, WriteError
from fliprotate.core.models import MediaItem
from fliprotate.core.output_manager import NewFileSaver, OverwriteSaver, resolve_overwrite_format
from fliprotate.core.scanner import is_image_item


@pytest.mark.parametrize(
    ("ext", "expected"),
    [
        ("PNG", OutputFormat.PNG),
        ("png", OutputFormat.PNG),
        ("JPG", OutputFormat.JPEG),
        ("jpeg", OutputFormat.JPEG),
        ("WebP", OutputFormat.WEBP),
        ("bmp", OutputFormat.BMP),
        ("gif", "gif"),
    ],
)
def test_overwrite_format_follows_extension(ext: str, expected: object) -> None:
    item = MediaItem(id="1", file_path=Path(f"/library/photo.{ext}"), ext=ext)

    assert resolve_overwrite_format(item) == expected


def test_overwrite_format_defaults_to_webp_without_extension() -> None:
    item = MediaItem(id="1", file_path=Path("/library/photo"))

    assert resolve_overwrite_format(item) == OutputFormat.WEBP


def test_overwrite_format_uses_name_when_ext_missing() -> None:
    item = MediaItem(id="1", file_path=Path("/library/blob"), name="holiday.Jpeg")

    assert resolve_overwrite_format(item) == OutputFormat.JPEG


def test_overwrite_replaces_source_and_refreshes(tmp_path: Path, library: FakeLibrary) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    item = item_for(source, "42")

    location = OverwriteSaver(library).save(b"new-bytes", item)

    assert location.path == source
    assert location.mode is SaveMode.OVERWRITE
    assert location.format == "png"
    assert source.read_bytes() == b"new-bytes"
    assert library.refreshed == ["42"]
    assert [p.name for p in source.parent.iterdir()] == ["photo.png"]


def test_overwrite_refresh_failure_is_not_fatal(
    tmp_path: Path, library: FakeLibrary, caplog: pytest.LogCaptureFixture
) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    library.refresh_error = RuntimeError("thumbnail service down")

    with caplog.at_level(logging.WARNING):
        location = OverwriteSaver(library).save(b"new-bytes", item_for(source))

    assert location.path == source
    assert source.read_bytes() == b"new-bytes"
    assert "thumbnail service down" in caplog.text


def test_overwrite_write_failure_raises(tmp_path: Path, library: FakeLibrary) -> None:
    item = item_for(tmp_path / "missing-dir" / "photo.png")

    with pytest.raises(WriteError):
        OverwriteSaver(library).save(b"data", item)


def test_new_file_uses_stem_and_format_extension(tmp_path: Path, library: FakeLibrary) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")

    location = NewFileSaver(library).save(b"webp-bytes", item_for(source), OutputFormat.WEBP)

    assert location.path == library.temp_dir / "photo.webp"
    assert location.mode is SaveMode.NEW
    assert library.added == [library.temp_dir / "photo.webp"]
    assert library.added_bytes == [b"webp-bytes"]
    # 登记成功后临时文件被删除
    assert not location.path.exists()


def test_new_file_collision_appends_counter(tmp_path: Path, library: FakeLibrary) -> None:
    source = save_image(tmp_path / "lib" / "photo.jpg")
    (library.temp_dir / "photo.webp").write_bytes(b"existing")

    first = NewFileSaver(library).save(b"a", item_for(source), OutputFormat.WEBP)
    assert first.path.name == "photo_1.webp"

    (library.temp_dir / "photo_1.webp").write_bytes(b"existing")
    second = NewFileSaver(library).save(b"b", item_for(source), OutputFormat.WEBP)
    assert second.path.name == "photo_2.webp"

    assert (library.temp_dir / "photo.webp").read_bytes() == b"existing"


def test_new_file_does_not_reuse_name_within_run(tmp_path: Path, library: FakeLibrary) -> None:
    saver = NewFileSaver(library)
    first = save_image(tmp_path / "a" / "photo.png")
    second = save_image(tmp_path / "b" / "photo.jpg")

    saver.save(b"1", item_for(first, "1"), OutputFormat.PNG)
    saver.save(b"2", item_for(second, "2"), OutputFormat.PNG)

    assert [p.name for p in library.added] == ["photo.png", "photo_1.png"]


def test_library_rejection_keeps_temp_file(tmp_path: Path, library: FakeLibrary) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    library.add_result = False

    with pytest.raises(LibraryAddError):
        NewFileSaver(library).save(b"keep-me", item_for(source), OutputFormat.BMP)

    leftover = library.temp_dir / "photo.bmp"
    assert leftover.read_bytes() == b"keep-me"


def test_temp_cleanup_failure_is_only_a_warning(
    tmp_path: Path, library: FakeLibrary, caplog: pytest.LogCaptureFixture
) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    library.consume_on_add = True

    with caplog.at_level(logging.WARNING):
        location = NewFileSaver(library).save(b"data", item_for(source), OutputFormat.PNG)

    assert location.path.name == "photo.png"
    assert "photo.png" in caplog.text


def test_overwrite_refresh_returning_false_is_not_fatal(
    tmp_path: Path, library: FakeLibrary, caplog: pytest.LogCaptureFixture
) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    library.refresh_result = False

    with caplog.at_level(logging.WARNING):
        location = OverwriteSaver(library).save(b"new-bytes", item_for(source))

    assert location.path == source
    assert source.read_bytes() == b"new-bytes"
    assert any(record.levelno == logging.WARNING for record in caplog.records)


@pytest.mark.skipif(os.name == "nt", reason="POSIX 权限位")
def test_overwrite_keeps_file_permissions(tmp_path: Path, library: FakeLibrary) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")
    source.chmod(0o640)

    OverwriteSaver(library).save(b"new-bytes", item_for(source))

    assert stat.S_IMODE(source.stat().st_mode) == 0o640


def test_new_file_unusable_temp_directory_raises_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("regular file")
    library = FakeLibrary(blocker / "temp")
    source = save_image(tmp_path / "lib" / "photo.png")

    with pytest.raises(WriteError):
        NewFileSaver(library).save(b"data", item_for(source), OutputFormat.WEBP)

    assert library.added == []


def test_new_file_write_failure_raises_write_error(
    tmp_path: Path, library: FakeLibrary, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = save_image(tmp_path / "lib" / "photo.png")

    def failing_write(self: Path, data: bytes) -> int:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(Path, "write_bytes", failing_write)

    with pytest.raises(WriteError):
        NewFileSaver(library).save(b"data", item_for(source), OutputFormat.PNG)

    assert library.added == []
    assert list(library.temp_dir.iterdir()) == []


def test_extension_without_dot_in_name_is_the_whole_name() -> None:
    item = MediaItem(id="1", file_path=Path("/library/holiday.png"), name="holiday")

    assert item.extension == "holiday"
    assert not is_image_item(item)
