"""Where reports go and how they are written"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import COMBINED_REPORT_NAME, REPORT_SUFFIX

logger = logging.getLogger(__name__)


def per_file_report_path(source: Union[str, Path], output_dir: Optional[Path] = None) -> Path:
    """<output_dir or the source's directory>/<source file name>.para.csv"""
    source = Path(source)
    directory = Path(output_dir) if output_dir is not None else source.parent
    return directory / f"{source.name}{REPORT_SUFFIX}"


def combined_report_path(output_dir: Optional[Path] = None) -> Path:
    directory = Path(output_dir) if output_dir is not None else Path(".")
    return directory / COMBINED_REPORT_NAME


def write_table(frame: pd.DataFrame, path: Path) -> Path:
    """Write one report as CSV. Nulls become empty cells.

    Raises OSError if the destination cannot be written.
    """
    path = Path(path)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Created output directory: %s", path.parent)
    frame.to_csv(path, index=False)
    logger.info("Wrote %d rows to %s", len(frame), path)
    return path
