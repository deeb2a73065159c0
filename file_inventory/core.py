import logging
from typing import Callable, Optional

from tqdm import tqdm

from .host import collect_host_info
from .models import RunConfig, RunReport
from .reporting import ReportWriter
from .scanning.hasher import FileHasher
from .scanning.pool import DigestPool, DigestFn
from .scanning.walker import FileWalker


class InventoryApp:
    def __init__(self,
                 run_config: RunConfig,
                 digest_fn: Optional[DigestFn] = None,
                 host_info: Callable[[], dict] = collect_host_info):
        self.config = run_config
        self.walker = FileWalker()
        self.digest_fn = digest_fn or FileHasher()
        self.host_info = host_info
        self.writer = ReportWriter()
        self.pool: Optional[DigestPool] = None

    def scan(self) -> RunReport:
        """
        Executes the inventory pipeline.
        1. Collect host info
        2. Walk & Digest (concurrently, bounded by config.concurrency)
        3. Assemble the report

        The report is complete only when this returns.
        """
        cfg = self.config
        report = RunReport(host_data=self.host_info(), flag_data=cfg)

        logging.info(f"Scanning {cfg.start_dir} (sub-dirs={cfg.scan_sub_dirs})...")

        # Per-file lines replace the bar in debug mode
        with tqdm(desc="Hashing", unit="file", disable=cfg.debug) as progress:
            self.pool = DigestPool(
                self.digest_fn,
                concurrency=cfg.concurrency,
                on_record=lambda record: progress.update(1),
            )
            descriptors = self.walker.walk(cfg.start_dir, recurse=cfg.scan_sub_dirs)
            report.file_data = self.pool.run(descriptors)
            report.skipped = self.pool.skipped

        failed = len(report.failed)
        logging.info(f"Scan complete. Processed {len(report.file_data)} files ({failed} failed).")
        return report

    def abort(self):
        if self.pool:
            self.pool.abort()

    def run(self) -> RunReport:
        report = self.scan()
        self.writer.write(report, self.config.output_file)
        return report
