"""
End-to-end run: decode every file in parallel, aggregate on the calling
thread, assemble the tables and write them out.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .aggregator import Aggregator
from .config import ReportOptions
from .decode import DecodeSource, read_stdf
from .diagnostics import Diagnostic
from .output import combined_report_path, per_file_report_path, write_table
from .report import assemble_report, merge_reports
from .workers import iter_messages

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    file_id: int
    file_name: str
    devices: int
    table: Optional[pd.DataFrame]
    diagnostics: List[Diagnostic]


@dataclass
class RunSummary:
    results: List[FileResult]
    written: List[Path] = field(default_factory=list)

    @property
    def skipped(self) -> List[str]:
        return [r.file_name for r in self.results if r.table is None]

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for r in self.results for d in r.diagnostics]


class ReportWriteError(OSError):
    """One or more reports could not be written; the others were"""

    def __init__(self, failures, summary: RunSummary):
        paths = ", ".join(str(path) for path, _ in failures)
        super().__init__(f"could not write {len(failures)} report(s): {paths}")
        self.failures = failures
        self.summary = summary


def aggregate(options: ReportOptions, decode: DecodeSource = read_stdf) -> Aggregator:
    aggregator = Aggregator(options, options.files)
    aggregator.consume(iter_messages(options.files, decode))
    return aggregator


def build_reports(options: ReportOptions, decode: DecodeSource = read_stdf) -> List[FileResult]:
    """One FileResult per input file, in input order"""
    results = []
    for state in aggregate(options, decode).finished_states():
        table = assemble_report(state, options)
        results.append(FileResult(
            file_id=state.file_id,
            file_name=state.file_name,
            devices=state.device_count,
            table=table,
            diagnostics=list(state.diagnostics),
        ))
    return results


def run(options: ReportOptions, decode: DecodeSource = read_stdf) -> RunSummary:
    """
    Produce the reports described by ``options``.

    Problems inside individual files end up in the summary's diagnostics.
    Only a failure to write a report escapes, as OSError (ReportWriteError
    in split mode, raised after every other report has been written).
    """
    logger.info("Processing %d STDF files...", len(options.files))
    summary = RunSummary(results=build_reports(options, decode))
    reports = [r for r in summary.results if r.table is not None]

    if not reports:
        logger.warning("No file produced a report")
        return summary

    if options.split_output:
        failures = []
        for result in reports:
            path = per_file_report_path(result.file_name, options.output_dir)
            try:
                summary.written.append(write_table(result.table, path))
            except OSError as e:
                logger.error("Error writing report %s: %s", path, e)
                failures.append((path, e))
        if failures:
            raise ReportWriteError(failures, summary)
    else:
        merged = merge_reports([r.table for r in reports])
        summary.written.append(write_table(merged, combined_report_path(options.output_dir)))

    return summary
