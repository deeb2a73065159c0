import os
import logging
import stat
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from ..models import FileRecord, split_extension


class FileWalker:
    def walk(self, root: Path, recurse: bool = True) -> Iterator[FileRecord]:
        """
        Generator that yields a digest-less FileRecord for every regular file under root.

        Args:
            root: Directory to scan. If it is a file, only that file is yielded.
            recurse: Descend into subdirectories without bound. When False only
                     the entries directly inside root are visited.

        Unreadable directories and entries that fail to stat are logged and
        skipped; traversal always continues.

        Paths are absolute with root canonicalized; a file symlink keeps its
        own path (not its target's), so every emitted path is unique.
        """
        try:
            root = Path(root).resolve()
            root_stat = root.stat()
        except OSError as e:
            logging.error(f"Cannot access start path {root}: {e}")
            return

        if not stat.S_ISDIR(root_stat.st_mode):
            record = self._to_record(root, root_stat)
            if record:
                yield record
            return

        yield from self._iter_files(root, recurse)

    def _iter_files(self, root: Path, recurse: bool) -> Iterator[FileRecord]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                logging.warning(f"Cannot read directory {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            for e in entries:
                path = current / e.name
                try:
                    # Directory symlinks are never followed
                    if e.is_dir(follow_symlinks=False):
                        if recurse:
                            dirs.append(path)
                        continue
                    st = e.stat(follow_symlinks=True)
                except OSError as err:
                    logging.warning(f"Skipping {path}: {err}")
                    continue

                record = self._to_record(path, st)
                if record:
                    yield record

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

    def _to_record(self, path: Path, st: os.stat_result) -> Optional[FileRecord]:
        if not stat.S_ISREG(st.st_mode):
            logging.debug(f"Skipping non-regular file {path}")
            return None

        return FileRecord(
            path=str(path),
            name=path.name,
            extension=split_extension(path.name),
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime).astimezone(),
            permissions=st.st_mode,
        )
