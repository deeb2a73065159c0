import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .. import config
from ..exceptions import ConfigurationError
from ..models import FileRecord
from .hasher import DigestResult

DigestFn = Callable[[Path], DigestResult]

_STOP = object()


class RecordCollector:
    """
    Shared result list. Every mutation goes through `append`, which holds
    the lock for the whole record, so readers never see a partial entry.
    """

    def __init__(self, on_record: Optional[Callable[[FileRecord], None]] = None):
        self._lock = threading.Lock()
        self._records: List[FileRecord] = []
        self._skipped = 0
        self._on_record = on_record

    def append(self, record: FileRecord):
        with self._lock:
            self._records.append(record)
            if self._on_record:
                # The record is already stored; a failing callback must not kill the worker
                try:
                    self._on_record(record)
                except Exception as e:
                    logging.error(f"Record callback failed for {record.path}: {e}")

    def mark_skipped(self):
        with self._lock:
            self._skipped += 1

    @property
    def skipped(self) -> int:
        with self._lock:
            return self._skipped

    def snapshot(self) -> List[FileRecord]:
        with self._lock:
            return list(self._records)


class DigestPool:
    """
    Bounded producer/consumer pool.

    One producer thread drains the walker into a bounded queue; exactly
    `concurrency` long-lived workers pull descriptors, digest them and append
    the finished records. The walker blocks when the queue is full, so the
    number of in-flight files never exceeds `concurrency` and pending
    descriptors never exceed the queue depth.

    Records come back in completion order, which is not deterministic.
    """

    def __init__(self,
                 digest_fn: DigestFn,
                 concurrency: int = config.DEFAULT_CONCURRENCY,
                 queue_size: Optional[int] = None,
                 on_record: Optional[Callable[[FileRecord], None]] = None):
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ConfigurationError(f"Concurrency must be a positive integer, got {concurrency!r}")

        self.digest_fn = digest_fn
        self.concurrency = concurrency
        self.queue_size = queue_size or concurrency * config.QUEUE_DEPTH_FACTOR
        self._on_record = on_record
        self._abort = threading.Event()
        self._collector = RecordCollector(on_record)

    def abort(self):
        """Stops dispatching new descriptors; files already being digested finish."""
        self._abort.set()

    @property
    def aborted(self) -> bool:
        return self._abort.is_set()

    @property
    def skipped(self) -> int:
        return self._collector.skipped

    def run(self, descriptors: Iterable[FileRecord]) -> List[FileRecord]:
        """
        Digests every descriptor and returns the finished records.

        Returns only after the producer and all workers have exited. A
        KeyboardInterrupt aborts the run, waits for in-flight digests to
        drain, and is then re-raised.
        """
        # Fresh per run so a pool can be reused
        self._collector = RecordCollector(self._on_record)
        work: queue.Queue = queue.Queue(maxsize=self.queue_size)

        logging.info(f"Digesting with {self.concurrency} workers")

        with ThreadPoolExecutor(max_workers=self.concurrency + 1, thread_name_prefix="digest") as executor:
            producer = executor.submit(self._produce, descriptors, work)
            workers = [executor.submit(self._work, work) for _ in range(self.concurrency)]
            futures = [producer, *workers]

            try:
                wait(futures)
            except KeyboardInterrupt:
                logging.warning("Abort requested; waiting for in-flight files to finish...")
                self.abort()
                wait(futures)
                raise

            # Surface walker failures; per-file errors never get this far
            producer.result()
            for w in workers:
                w.result()

        return self._collector.snapshot()

    def _produce(self, descriptors: Iterable[FileRecord], work: queue.Queue):
        try:
            for record in descriptors:
                if not self._put(work, record):
                    logging.info("Dispatch stopped after abort")
                    break
        finally:
            # Workers keep draining even after an abort, so these can't block forever
            for _ in range(self.concurrency):
                work.put(_STOP)

    def _put(self, work: queue.Queue, item) -> bool:
        while not self._abort.is_set():
            try:
                work.put(item, timeout=0.1)
                return True
            except queue.Full:
                continue
        return False

    def _work(self, work: queue.Queue):
        while True:
            item = work.get()
            try:
                if item is _STOP:
                    return
                if self._abort.is_set():
                    self._collector.mark_skipped()
                    continue
                self._collector.append(self._process(item))
            except Exception as e:
                # A dead worker would leave the producer blocked on a full queue
                logging.error(f"Worker failed on {getattr(item, 'path', item)}: {e}")
            finally:
                work.task_done()

    def _process(self, record: FileRecord) -> FileRecord:
        logging.debug(f"Processing file: {record.path}")
        try:
            result = self.digest_fn(Path(record.path))
        except Exception as e:
            logging.error(f"Failed to digest {record.path}: {e}")
            kinds = getattr(self.digest_fn, "kinds", config.DIGEST_KINDS)
            errors = {kind: f"{type(e).__name__}: {e}" for kind in kinds}
            return record.with_digests({}, errors)

        if not result.ok:
            logging.warning(f"Failed to digest {record.path}: {next(iter(result.errors.values()))}")
        return record.with_digests(result.digests, result.errors)
