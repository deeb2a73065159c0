import pytest
from file_inventory.scanning.hasher import FileHasher

@pytest.fixture
def sample_tree(tmp_path):
    """a.txt ("hello"), b.bin (empty) and sub/c.txt ("x") under tmp_path/root."""
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_text("hello")
    (root / "b.bin").write_bytes(b"")
    sub = root / "sub"
    sub.mkdir()
    (sub / "c.txt").write_text("x")
    return root

@pytest.fixture
def hasher():
    return FileHasher()

@pytest.fixture
def fixed_host():
    """Host info stub so tests don't depend on the machine."""
    return lambda: {"hostname": "test-host", "os": "linux"}
