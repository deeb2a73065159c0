import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable

from .. import config
from ..exceptions import ConfigurationError, FileHashError


@dataclass(frozen=True)
class DigestResult:
    digests: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class FileHasher:
    def __init__(self, kinds: Iterable[str] = config.DIGEST_KINDS, chunk_size: int = config.HASH_CHUNK_SIZE):
        self.kinds = tuple(k.lower() for k in kinds)
        if not self.kinds:
            raise ConfigurationError("At least one digest kind is required")
        # shake_* need an output length, so they can't share hexdigest()
        unknown = [k for k in self.kinds if k not in hashlib.algorithms_guaranteed or k.startswith("shake_")]
        if unknown:
            raise ConfigurationError(f"Unsupported digest kinds: {', '.join(unknown)}")
        if chunk_size < 1:
            raise ConfigurationError(f"Chunk size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def __call__(self, path: Path) -> DigestResult:
        return self.compute_digests(path)

    def compute_digests(self, path: Path) -> DigestResult:
        """
        Computes every configured digest of the file in a single read pass.

        Never raises for I/O problems: if the file cannot be opened or read
        (permissions, vanished since listing), every kind is marked failed
        with the error text. A file that changes size while being read is
        digested over whatever bytes were actually read.
        """
        try:
            return DigestResult(digests=self._read_digests(path))
        except FileHashError as e:
            return DigestResult(errors={kind: str(e) for kind in self.kinds})

    def digest_bytes(self, data: bytes) -> Dict[str, str]:
        hashers = self._new_hashers()
        for h in hashers.values():
            h.update(data)
        return {kind: h.hexdigest() for kind, h in hashers.items()}

    def _read_digests(self, path: Path) -> Dict[str, str]:
        hashers = self._new_hashers()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    for h in hashers.values():
                        h.update(chunk)
        except OSError as e:
            raise FileHashError(f"{type(e).__name__}: {e}") from e
        return {kind: h.hexdigest() for kind, h in hashers.items()}

    def _new_hashers(self):
        return {kind: hashlib.new(kind) for kind in self.kinds}
