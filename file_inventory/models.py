from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class FileRecord:
    """
    Represents a regular file found during a scan.

    Created by the walker with no digests (a "descriptor"), then replaced by
    the worker that digests it. Digests are all-or-nothing: either every kind
    is in `digests` or every kind is in `digest_errors`.
    """
    path: str
    name: str
    extension: str
    size: int
    modified_at: datetime
    permissions: int
    is_dir: bool = False

    digests: Dict[str, str] = field(default_factory=dict)
    digest_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def digest_state(self) -> str:
        if self.digest_errors:
            return "failed"
        if self.digests:
            return "complete"
        return "pending"

    def with_digests(self, digests: Dict[str, str], errors: Dict[str, str]) -> "FileRecord":
        return replace(self, digests=dict(digests), digest_errors=dict(errors))

    @property
    def digest_kinds(self) -> List[str]:
        """Kinds this record was digested with; the default set while pending."""
        requested = set(self.digests) | set(self.digest_errors)
        if not requested:
            return list(config.DIGEST_KINDS)
        ordered = [k for k in config.DIGEST_KINDS if k in requested]
        return ordered + sorted(requested - set(ordered))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file_path": self.path,
            "file_name": self.name,
            "extension": self.extension,
            "size": self.size,
            "mod_time": self.modified_at.isoformat(),
            "is_dir": self.is_dir,
            "permissions": self.permissions,
        }
        # Only requested kinds appear; failed ones are null, never ""
        for kind in self.digest_kinds:
            data[kind] = self.digests.get(kind)
        data["digest_errors"] = dict(self.digest_errors)
        return data


def split_extension(name: str) -> str:
    """Returns the text after the last '.' in name, or '' if there is none."""
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


@dataclass(frozen=True)
class RunConfig:
    """Operator-supplied parameters for one run. Read-only once built."""
    start_dir: Path = Path(config.DEFAULT_START_DIR)
    scan_sub_dirs: bool = True
    concurrency: int = config.DEFAULT_CONCURRENCY
    output_file: Path = Path(config.DEFAULT_OUTPUT_FILE)
    debug: bool = False
    log_file: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ConfigurationError(f"Concurrency must be an integer, got {self.concurrency!r}")
        if self.concurrency < 1:
            raise ConfigurationError(f"Concurrency must be a positive integer, got {self.concurrency}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "debug": self.debug,
            "start_dir": str(self.start_dir),
            "scan_sub_dirs": self.scan_sub_dirs,
            "output_file": str(self.output_file),
            "concurrency": self.concurrency,
        }


@dataclass
class RunReport:
    """
    Host info, run configuration and the collected records.

    `file_data` is in completion order, which varies from run to run.
    """
    host_data: Dict[str, Any]
    flag_data: RunConfig
    file_data: List[FileRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def failed(self) -> List[FileRecord]:
        return [r for r in self.file_data if r.digest_state == "failed"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host_data": self.host_data,
            "flag_data": self.flag_data.to_dict(),
            "file_data": [r.to_dict() for r in self.file_data],
        }
