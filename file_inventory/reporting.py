import json
import logging
import os
import tempfile
from pathlib import Path

from .exceptions import OutputWriteError
from .models import RunReport


class ReportWriter:
    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, report: RunReport) -> str:
        return json.dumps(report.to_dict(), indent=self.indent, default=str)

    def write(self, report: RunReport, output_file: Path) -> Path:
        """
        Writes the report as JSON.

        The document goes to a temp file beside the destination and is moved
        into place with os.replace, so the output is either the complete new
        report or whatever was there before.
        """
        dest = Path(output_file).absolute()
        payload = self.render(report)

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            # mkstemp creates 0600
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, dest)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise OutputWriteError(f"Error writing to output file {dest}: {e}") from e

        logging.info(f"Wrote {len(report.file_data)} records to {dest}")
        return dest
