import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import InventoryApp
from .exceptions import ConfigurationError, OutputWriteError
from .models import RunConfig

TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def str_to_bool(value: str) -> bool:
    text = value.strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got {value!r}")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="file-inventory", description=config.USAGE_DESCRIPTION)

    p.add_argument("--start-dir", type=Path, default=Path(config.DEFAULT_START_DIR),
                   help="Starting directory for file scanning (default: %(default)s)")
    p.add_argument("--sub-dirs", type=str_to_bool, nargs="?", const=True, default=True,
                   help="Scan subdirectories (default: true)")
    p.add_argument("--output", type=Path, default=Path(config.DEFAULT_OUTPUT_FILE),
                   help="Output file path (default: %(default)s)")
    p.add_argument("--concurrency", type=positive_int, default=config.DEFAULT_CONCURRENCY,
                   help="Number of concurrent workers (default: %(default)s)")
    p.add_argument("--debug", type=str_to_bool, nargs="?", const=True, default=False,
                   help="Enable debug output with per-file progress")
    p.add_argument("--log-file", type=Path, default=None,
                   help="Also write the log to this file")
    return p


def parse_args(argv=None) -> RunConfig:
    args = build_parser().parse_args(argv)
    return RunConfig(
        start_dir=args.start_dir,
        scan_sub_dirs=args.sub_dirs,
        concurrency=args.concurrency,
        output_file=args.output,
        debug=args.debug,
        log_file=args.log_file,
    )


def main(argv=None) -> int:
    run_config = parse_args(argv)
    setup_logging(run_config.debug, run_config.log_file)

    logging.info("=== File Inventory Started ===")
    logging.info(f"Start dir: {run_config.start_dir}")
    logging.info(f"Output:    {run_config.output_file}")

    if not run_config.start_dir.exists():
        logging.error(f"Start directory {run_config.start_dir} does not exist.")
        return 2

    try:
        app = InventoryApp(run_config)
        app.run()
    except ConfigurationError as e:
        logging.error(f"Invalid configuration: {e}")
        return 2
    except OutputWriteError as e:
        logging.error(str(e))
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1

    logging.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
