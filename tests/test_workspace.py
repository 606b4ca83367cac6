import os
import shutil
import time
import uuid
from pathlib import Path

import pytest

from text_cleaner.cleaning import workspace as workspace_mod
from text_cleaner.cleaning.errors import InputWriteFailed
from text_cleaner.cleaning.workspace import Workspace


def test_create_input_artifact_writes_bytes_with_extension(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    path = ws.create_input_artifact(b"\x89PNG data", "png")

    assert path.parent == scratch_dir.resolve()
    assert path.suffix == ".png"
    assert path.read_bytes() == b"\x89PNG data"


def test_scratch_dir_is_created_on_first_use(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    assert not scratch_dir.exists()
    ws.create_input_artifact(b"x", "ppm")
    assert scratch_dir.is_dir()


def test_names_are_unique_for_identical_input(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    paths = {ws.create_input_artifact(b"same", "jpg") for _ in range(50)}
    assert len(paths) == 50


def test_output_path_is_reserved_next_to_input_but_not_created(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    inp = ws.create_input_artifact(b"x", "jpeg")
    out = ws.allocate_output_path("jpeg", beside=inp)

    assert out.parent == inp.parent
    assert out != inp
    assert out.suffix == ".jpeg"
    assert not out.exists()


def test_unwritable_scratch_dir_raises_input_write_failed(tmp_path: Path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way", encoding="utf-8")
    ws = Workspace(blocker)

    with pytest.raises(InputWriteFailed) as excinfo:
        ws.create_input_artifact(b"x", "png")
    assert excinfo.value.kind == "InputWriteFailed"


def test_partial_write_is_removed_before_error(scratch_dir: Path, monkeypatch: pytest.MonkeyPatch):
    real_fdopen = os.fdopen

    class _DiskFull:
        def __init__(self, fd):
            self._f = real_fdopen(fd, "wb")

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self._f.close()

        def write(self, data):
            self._f.write(data[:1])
            self._f.flush()
            raise OSError(28, "No space left on device")

    monkeypatch.setattr(workspace_mod.os, "fdopen", lambda fd, mode: _DiskFull(fd))
    ws = Workspace(scratch_dir)

    with pytest.raises(InputWriteFailed):
        ws.create_input_artifact(b"abcdef", "png")
    assert list(scratch_dir.iterdir()) == []


def test_delete_artifact_is_best_effort(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    path = ws.create_input_artifact(b"x", "png")

    assert ws.delete_artifact(path) is True
    assert not path.exists()
    # Deleting again is fine
    assert ws.delete_artifact(path) is True


def test_delete_artifact_swallows_errors(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    directory = scratch_dir / "sub"
    directory.mkdir(parents=True)
    # unlink() on a directory fails; the error must not escape
    assert ws.delete_artifact(directory) is False
    assert directory.is_dir()


def test_sweep_orphans_removes_only_stale_files(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    old = ws.create_input_artifact(b"old", "png")
    new = ws.create_input_artifact(b"new", "png")
    past = time.time() - 3 * 3600
    os.utime(old, (past, past))

    removed = ws.sweep_orphans(3600)

    assert removed == 1
    assert not old.exists()
    assert new.exists()


def test_sweep_orphans_without_scratch_dir(scratch_dir: Path):
    assert Workspace(scratch_dir).sweep_orphans(0) == 0


def test_sweep_orphans_leaves_foreign_files_alone(tmp_path: Path):
    pictures = tmp_path / "Pictures"
    pictures.mkdir()
    photo = pictures / "holiday.jpg"
    photo.write_bytes(b"not ours")
    orphan = pictures / f"{uuid.uuid4().hex}.jpg"
    orphan.write_bytes(b"ours")
    past = time.time() - 48 * 3600
    os.utime(photo, (past, past))
    os.utime(orphan, (past, past))

    removed = Workspace(pictures).sweep_orphans(24 * 3600)

    assert removed == 1
    assert photo.exists()
    assert not orphan.exists()


def test_scratch_dir_is_recreated_after_external_removal(scratch_dir: Path):
    ws = Workspace(scratch_dir)
    ws.delete_artifact(ws.create_input_artifact(b"x", "png"))
    # e.g. systemd-tmpfiles cleaning /tmp while the program runs
    shutil.rmtree(scratch_dir)

    path = ws.create_input_artifact(b"y", "png")

    assert scratch_dir.is_dir()
    assert path.read_bytes() == b"y"
