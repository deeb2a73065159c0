import hashlib
import json
import pytest
from pathlib import Path
from file_inventory import main as cli
from file_inventory.core import InventoryApp
from file_inventory.models import RunConfig
from file_inventory.scanning.hasher import FileHasher
from file_inventory.scanning import hasher as hasher_module

EMPTY_MD5 = "d41d8cd98f00b204e9800998ecf8427e"
HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """main() reconfigures the root logger; keep pytest's capture handlers in place."""
    monkeypatch.setattr(cli, "setup_logging", lambda verbose, log_file=None: None)


def run_app(root, tmp_path, host, **kwargs):
    cfg = RunConfig(start_dir=root, output_file=tmp_path / "report.json", debug=True, **kwargs)
    return InventoryApp(cfg, host_info=host).run()


def test_end_to_end_recursive(sample_tree, tmp_path, fixed_host):
    report = run_app(sample_tree, tmp_path, fixed_host, scan_sub_dirs=True, concurrency=2)

    by_name = {r.name: r for r in report.file_data}
    assert set(by_name) == {"a.txt", "b.bin", "c.txt"}
    assert by_name["b.bin"].digests["md5"] == EMPTY_MD5
    assert by_name["a.txt"].digests["md5"] == HELLO_MD5

    doc = json.loads((tmp_path / "report.json").read_text(encoding="utf-8"))
    assert doc["host_data"] == {"hostname": "test-host", "os": "linux"}
    assert len(doc["file_data"]) == 3


def test_end_to_end_non_recursive(sample_tree, tmp_path, fixed_host):
    report = run_app(sample_tree, tmp_path, fixed_host, scan_sub_dirs=False, concurrency=2)
    assert sorted(r.name for r in report.file_data) == ["a.txt", "b.bin"]


def test_unreadable_file_is_still_reported(sample_tree, tmp_path, fixed_host, monkeypatch):
    real_open = open

    def guarded_open(path, *args, **kwargs):
        if Path(path).name == "a.txt":
            raise PermissionError(13, "Permission denied", str(path))
        return real_open(path, *args, **kwargs)

    monkeypatch.setattr(hasher_module, "open", guarded_open, raising=False)
    report = run_app(sample_tree, tmp_path, fixed_host, concurrency=2)

    by_name = {r.name: r for r in report.file_data}
    assert len(by_name) == 3
    assert by_name["a.txt"].digest_state == "failed"
    assert by_name["c.txt"].digest_state == "complete"

    doc = json.loads((tmp_path / "report.json").read_text(encoding="utf-8"))
    entry = next(e for e in doc["file_data"] if e["file_name"] == "a.txt")
    assert entry["md5"] is None


def test_same_content_same_digest_across_paths(tmp_path, fixed_host):
    root = tmp_path / "dup"
    (root / "x").mkdir(parents=True)
    (root / "one.txt").write_text("same bytes")
    (root / "x" / "two.dat").write_text("same bytes")

    report = run_app(root, tmp_path, fixed_host)
    one, two = sorted(report.file_data, key=lambda r: r.name)
    assert one.digests == two.digests


def test_cli_writes_report(sample_tree, tmp_path, monkeypatch):
    monkeypatch.setattr("file_inventory.core.collect_host_info", lambda: {"hostname": "cli"})
    out = tmp_path / "cli.json"

    code = cli.main([
        "--start-dir", str(sample_tree),
        "--sub-dirs", "false",
        "--concurrency", "3",
        "--output", str(out),
    ])

    assert code == 0
    doc = json.loads(out.read_text(encoding="utf-8"))
    assert doc["flag_data"]["scan_sub_dirs"] is False
    assert doc["flag_data"]["concurrency"] == 3
    assert sorted(e["file_name"] for e in doc["file_data"]) == ["a.txt", "b.bin"]


def test_cli_missing_start_dir(tmp_path):
    code = cli.main(["--start-dir", str(tmp_path / "missing"), "--output", str(tmp_path / "o.json")])
    assert code == 2
    assert not (tmp_path / "o.json").exists()


def test_cli_unwritable_output(sample_tree, tmp_path, monkeypatch):
    monkeypatch.setattr("file_inventory.core.collect_host_info", lambda: {})
    code = cli.main(["--start-dir", str(sample_tree), "--output", str(tmp_path / "nodir" / "o.json")])
    assert code == 1


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--help"])
    assert exc.value.code == 0
    assert "--concurrency" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-2", "many"])
def test_cli_rejects_bad_concurrency(value):
    with pytest.raises(SystemExit) as exc:
        cli.parse_args(["--concurrency", value])
    assert exc.value.code == 2


def test_parse_args_defaults():
    cfg = cli.parse_args([])
    assert cfg.start_dir == Path(".")
    assert cfg.scan_sub_dirs is True
    assert cfg.concurrency == 10
    assert cfg.output_file == Path("file_data.json")
    assert cfg.debug is False


@pytest.mark.parametrize("argv,expected", [
    (["--sub-dirs"], True),
    (["--sub-dirs", "false"], False),
    (["--sub-dirs=0"], False),
    (["--sub-dirs", "yes"], True),
])
def test_sub_dirs_flag(argv, expected):
    assert cli.parse_args(argv).scan_sub_dirs is expected


def test_custom_digest_kinds_reach_the_report(sample_tree, tmp_path, fixed_host):
    cfg = RunConfig(start_dir=sample_tree, output_file=tmp_path / "report.json", debug=True)
    report = InventoryApp(cfg, digest_fn=FileHasher(kinds=["sha512"]), host_info=fixed_host).run()

    assert all(r.digest_state == "complete" for r in report.file_data)
    doc = json.loads((tmp_path / "report.json").read_text(encoding="utf-8"))
    entry = next(e for e in doc["file_data"] if e["file_name"] == "a.txt")
    assert entry["sha512"] == hashlib.sha512(b"hello").hexdigest()
    assert "md5" not in entry
    assert entry["digest_errors"] == {}


def test_abort_counts_skipped_files(sample_tree, tmp_path, fixed_host):
    cfg = RunConfig(start_dir=sample_tree, output_file=tmp_path / "report.json", concurrency=1, debug=True)
    app = InventoryApp(cfg, host_info=fixed_host)
    hasher = FileHasher()

    def abort_after_first(path):
        app.abort()
        return hasher.compute_digests(path)

    app.digest_fn = abort_after_first
    report = app.scan()

    assert app.pool.aborted
    assert report.skipped == app.pool.skipped
    assert len(report.file_data) >= 1
    assert len(report.file_data) + report.skipped <= 3
