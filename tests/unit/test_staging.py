"""
StagingArea / StagedFile lifecycle.
"""

import pytest

from exceptions import ResourceError
from infrastructure.staging import StagingArea


class TestStagingArea:

    def test_acquire_creates_empty_unique_files(self, tmp_path):
        with StagingArea(root=str(tmp_path)) as staging:
            first = staging.acquire("prism.zip")
            second = staging.acquire("prism.zip")

            assert first.path != second.path
            assert first.path.parent == staging.directory
            assert first.path.name.startswith("prism.zip.")
            assert first.size() == 0
            assert len(staging.handles) == 2

    def test_exit_removes_everything(self, tmp_path):
        with StagingArea(root=str(tmp_path)) as staging:
            handle = staging.acquire("prism.mdb")
            with handle.open("wb") as out:
                out.write(b"data")
            directory = staging.directory

        assert not handle.path.exists()
        assert not directory.exists()
        assert list(tmp_path.iterdir()) == []
        assert staging.released

    def test_exit_on_error_still_releases(self, tmp_path):
        with pytest.raises(RuntimeError):
            with StagingArea(root=str(tmp_path)) as staging:
                staging.acquire("prism.csv")
                raise RuntimeError("converter crashed")
        assert list(tmp_path.iterdir()) == []

    def test_release_is_idempotent(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))
        staging.open()
        staging.acquire("prism.json")
        staging.release()
        staging.release()
        assert staging.released

    def test_acquire_after_release_fails(self, tmp_path):
        with StagingArea(root=str(tmp_path)) as staging:
            pass
        with pytest.raises(ResourceError, match="already released"):
            staging.acquire("prism.zip")

    def test_acquire_before_open_fails(self, tmp_path):
        with pytest.raises(ResourceError, match="not open"):
            StagingArea(root=str(tmp_path)).acquire("prism.zip")

    def test_reopen_after_release_fails(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))
        staging.open()
        staging.release()
        with pytest.raises(ResourceError):
            staging.open()

    def test_missing_root_is_resource_error(self, tmp_path):
        with pytest.raises(ResourceError, match="couldn't create staging directory"):
            StagingArea(root=str(tmp_path / "does-not-exist")).open()


class TestStagedFile:

    def test_open_after_release_fails(self, tmp_path):
        with StagingArea(root=str(tmp_path)) as staging:
            handle = staging.acquire("prism.zip")
            handle.release()
            assert not handle.path.exists()
            with pytest.raises(ResourceError, match="already released"):
                handle.open("rb")

    def test_write_then_read(self, tmp_path):
        with StagingArea(root=str(tmp_path)) as staging:
            handle = staging.acquire("prism.csv")
            with handle.open("wb") as out:
                out.write(b"a,b\n1,2\n")
            with handle.open("rb") as stream:
                assert stream.read() == b"a,b\n1,2\n"
            assert handle.size() == 8
