"""
Tests for file-backed and in-memory storage
"""
import shutil
import tempfile
from pathlib import Path

import pytest

from compute_jobs.core.exceptions import ReadError, WriteError
from compute_jobs.services.storage import FileStorage, InMemoryStorage


class TestFileStorage:
    """Test reading integers from and writing results to files"""

    def setup_method(self):
        """Setup test environment"""
        self.test_dir = Path(tempfile.mkdtemp())
        self.storage = FileStorage(base_dir=self.test_dir)

    def teardown_method(self):
        """Cleanup test environment"""
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_read_one_integer_per_line(self):
        """Blank lines and surrounding whitespace are ignored"""
        (self.test_dir / "input.txt").write_text("5\n\n  10 \n0\n", encoding="utf-8")

        assert self.storage.read("input.txt") == [5, 10, 0]

    def test_read_absolute_path(self):
        """Absolute paths bypass the base directory"""
        path = self.test_dir / "abs.txt"
        path.write_text("3\n4\n", encoding="utf-8")

        assert FileStorage().read(str(path)) == [3, 4]

    def test_read_invalid_integer(self):
        """A non-integer line raises ReadError naming the line"""
        (self.test_dir / "bad.txt").write_text("1\nabc\n", encoding="utf-8")

        with pytest.raises(ReadError, match="line 2"):
            self.storage.read("bad.txt")

    def test_read_missing_file(self):
        """A missing file raises ReadError"""
        with pytest.raises(ReadError, match="Error reading file"):
            self.storage.read("missing.txt")

    def test_read_rejects_other_suffixes(self):
        """Only .txt sources are accepted"""
        (self.test_dir / "input.csv").write_text("1\n", encoding="utf-8")

        with pytest.raises(ReadError, match=r"\.txt"):
            self.storage.read("input.csv")

    def test_read_rejects_parent_traversal(self):
        """Paths containing '..' are rejected"""
        with pytest.raises(ReadError, match="Invalid file path"):
            self.storage.read("../secret.txt")

    def test_read_empty_source(self):
        """An empty source name is rejected"""
        with pytest.raises(ReadError):
            self.storage.read("")

    def test_write_creates_parent_directories(self):
        """Output is written, creating missing directories"""
        self.storage.write("out/nested/result.txt", "5=120,0=1")

        written = (self.test_dir / "out" / "nested" / "result.txt").read_text(encoding="utf-8")
        assert written == "5=120,0=1"

    def test_write_overwrites(self):
        """A second write replaces the first"""
        self.storage.write("result.txt", "first")
        self.storage.write("result.txt", "second")

        assert (self.test_dir / "result.txt").read_text(encoding="utf-8") == "second"

    def test_write_rejects_parent_traversal(self):
        """Destinations containing '..' are rejected"""
        with pytest.raises(WriteError, match="Invalid file path"):
            self.storage.write("../escape.txt", "x")

    def test_write_failure_raises_write_error(self):
        """OS errors surface as WriteError"""
        (self.test_dir / "blocker").write_text("file, not a directory", encoding="utf-8")

        with pytest.raises(WriteError, match="Error writing file"):
            self.storage.write("blocker/result.txt", "x")


class TestInMemoryStorage:
    """Test the dict-backed storage"""

    def test_read_known_source(self):
        storage = InMemoryStorage({"numbers": [1, 2, 3]})

        assert storage.read("numbers") == [1, 2, 3]

    def test_read_unknown_source(self):
        storage = InMemoryStorage()

        with pytest.raises(ReadError, match="not found"):
            storage.read("nothing")

    def test_read_returns_copy(self):
        """Callers cannot alter stored input"""
        storage = InMemoryStorage({"numbers": [1, 2]})
        storage.read("numbers").append(99)

        assert storage.read("numbers") == [1, 2]

    def test_write_and_get_output(self):
        storage = InMemoryStorage()
        storage.add_source("later", [4])
        storage.write("out", "4=24")

        assert storage.read("later") == [4]
        assert storage.get_output("out") == "4=24"
        assert storage.get_output("other") is None

    def test_write_empty_destination(self):
        with pytest.raises(WriteError):
            InMemoryStorage().write("", "x")
