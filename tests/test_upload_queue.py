from pathlib import Path

from core.models.domain import UploadStatus
from core.uploads.queue import UploadQueue, is_image_file


def _files(tmp_path: Path, *names: str):
    paths = []
    for name in names:
        path = tmp_path / name
        path.write_bytes(b"data")
        paths.append(path)
    return paths


def test_is_image_file_by_extension():
    assert is_image_file(Path("a.png"))
    assert is_image_file(Path("b.JPG"))
    assert is_image_file(Path("c.webp"))
    assert not is_image_file(Path("notes.txt"))


def test_stage_replaces_previous_selection(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png", "b.png"))
    assert [item.name for item in queue.items] == ["a.png", "b.png"]

    queue.stage(_files(tmp_path, "c.png"))
    assert [item.name for item in queue.items] == ["c.png"]
    assert all(item.status is UploadStatus.STAGED for item in queue.items)
    assert queue.items[0].preview.startswith("file://")


def test_stage_skips_non_images(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png", "readme.txt"))
    assert [item.name for item in queue.items] == ["a.png"]


def test_remove_staged_returns_cancelled_item(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png", "b.png"))
    removed = queue.remove_staged(0)
    assert removed is not None
    assert removed.status is UploadStatus.CANCELLED
    assert [item.name for item in queue.items] == ["b.png"]
    assert queue.remove_staged(5) is None


def test_begin_upload_is_single_flight(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png", "b.png"))
    batch = queue.begin_upload()
    assert len(batch) == 2
    assert queue.is_uploading
    assert queue.begin_upload() == ()
    assert not queue.stage(_files(tmp_path, "c.png"))
    assert queue.remove_staged(0) is None
    assert not queue.clear_staged()


def test_begin_upload_with_nothing_staged():
    assert UploadQueue().begin_upload() == ()


def test_successful_upload_clears_set(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png"))
    queue.begin_upload()
    finished = queue.finish_upload()
    assert [item.status for item in finished] == [UploadStatus.DONE]
    assert len(queue) == 0
    assert not queue.is_uploading


def test_failed_upload_keeps_items_for_retry(tmp_path):
    queue = UploadQueue()
    queue.stage(_files(tmp_path, "a.png", "b.png"))
    queue.begin_upload()
    queue.finish_upload(RuntimeError("server exploded"))
    assert all(item.status is UploadStatus.FAILED for item in queue.items)
    assert queue.last_error == "server exploded"
    assert len(queue.pending) == 2

    retry = queue.begin_upload()
    assert len(retry) == 2
    assert queue.last_error is None
