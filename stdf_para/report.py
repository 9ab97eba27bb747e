"""
Report assembly: turns a finished FileState into a DataFrame, and merges
the per-file DataFrames into one combined table.

Column order for a file report:
    File Name, MIR/SDR header columns, device columns,
    parametric tests (first-seen order),
    functional tests (optional),
    pass/fail columns (optional, trailing block)
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .config import ReportOptions
from .diagnostics import DiagnosticKind, Severity
from .records import MIR
from .state import FileState

logger = logging.getLogger(__name__)

VALUE_DTYPE = "Float64"
FUNCTIONAL_DTYPE = "Int64"
PASS_FAIL_DTYPE = "Int8"


def setup_time(mir: MIR) -> str:
    """MIR SETUP_T (Unix seconds) as an ISO 8601 UTC timestamp"""
    return datetime.fromtimestamp(mir.setup_t, tz=timezone.utc).isoformat()


# (column name, getter(mir, sdr), dtype)
HEADER_COLUMNS = [
    ("Lot ID", lambda mir, sdr: mir.lot_id, None),
    ("Serial Num", lambda mir, sdr: mir.serl_num, None),
    ("Setup Time", lambda mir, sdr: setup_time(mir), None),
    ("Part Type", lambda mir, sdr: mir.part_typ, None),
    ("Design Rev", lambda mir, sdr: mir.dsgn_rev, None),
    ("Package Type", lambda mir, sdr: mir.pkg_typ, None),
    ("Facility ID", lambda mir, sdr: mir.facil_id, None),
    ("Process ID", lambda mir, sdr: mir.proc_id, None),
    ("Flow ID", lambda mir, sdr: mir.flow_id, None),
    ("Job Name", lambda mir, sdr: mir.job_nam, None),
    ("Job Rev", lambda mir, sdr: mir.job_rev, None),
    ("Operator Name", lambda mir, sdr: mir.oper_nam, None),
    ("Tester Type", lambda mir, sdr: mir.tstr_typ, None),
    ("Station Num", lambda mir, sdr: mir.stat_num, "Int64"),
    ("Exec Version", lambda mir, sdr: mir.exec_ver, None),
    ("Test Code", lambda mir, sdr: mir.test_cod, None),
    ("Mode Code", lambda mir, sdr: mir.mode_cod, None),
    ("Test Temperature", lambda mir, sdr: mir.tst_temp, None),
    ("Spec Name", lambda mir, sdr: mir.spec_nam, None),
    ("Spec Version", lambda mir, sdr: mir.spec_ver, None),
    ("Handler ID", lambda mir, sdr: sdr.hand_id, None),
    ("Handler Type", lambda mir, sdr: sdr.hand_typ, None),
    ("Loadboard ID", lambda mir, sdr: sdr.load_id, None),
    ("Cont ID", lambda mir, sdr: sdr.cont_id, None),
    ("DIB Type", lambda mir, sdr: sdr.dib_typ, None),
    ("DIB ID", lambda mir, sdr: sdr.dib_id, None),
]

DEVICE_COLUMNS = ["Part ID", "Part TXT", "HBIN", "HBIN Description", "SBIN", "SBIN Description"]


def _series(values, dtype=None) -> pd.Series:
    return pd.Series(list(values), dtype=dtype if dtype is not None else object)


def assemble_report(state: FileState, options: ReportOptions) -> Optional[pd.DataFrame]:
    """
    Build the table for one file.

    Returns None (and records a diagnostic) when the file never produced
    both a MIR and an SDR.
    """
    if not state.has_header:
        missing = [name for name, rec in (("MIR", state.mir), ("SDR", state.sdr)) if rec is None]
        state.diagnostics.add(
            DiagnosticKind.MISSING_HEADER,
            Severity.ERROR,
            f"no {' or '.join(missing)} found, skipping this file",
        )
        return None

    n = state.device_count
    mir, sdr = state.mir, state.sdr
    columns: Dict[str, pd.Series] = {"File Name": _series([state.file_name] * n)}

    for name, getter, dtype in HEADER_COLUMNS:
        columns[name] = _series([getter(mir, sdr)] * n, dtype)

    devices = state.devices
    columns["Part ID"] = _series(d.part_id for d in devices)
    columns["Part TXT"] = _series(d.part_txt for d in devices)
    columns["HBIN"] = _series((d.hard_bin for d in devices), "Int64")
    columns["HBIN Description"] = _series(state.hard_bins.describe(d.hard_bin) for d in devices)
    columns["SBIN"] = _series((d.soft_bin for d in devices), "Int64")
    columns["SBIN Description"] = _series(state.soft_bins.describe(d.soft_bin) for d in devices)

    for key in state.parametric.keys():
        columns[key] = _series(state.parametric[key], VALUE_DTYPE)

    functional_names = {}
    if options.include_functional:
        for key in state.functional.keys():
            # tagged in every file, so never merged into a parametric column
            name = options.functional_column(key)
            functional_names[key] = name
            columns[name] = _series(state.functional[key], FUNCTIONAL_DTYPE)

    if options.include_pass_fail:
        for key in state.parametric_pass_fail.keys():
            columns[options.pass_fail_column(key)] = _series(state.parametric_pass_fail[key], PASS_FAIL_DTYPE)
        for key, name in functional_names.items():
            columns[options.pass_fail_column(name)] = _series(state.functional_pass_fail[key], PASS_FAIL_DTYPE)

    frame = pd.DataFrame(columns)
    logger.debug("%s: %d rows x %d columns", state.file_name, *frame.shape)
    return frame


def merge_reports(frames: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Stack per-file reports into one table.

    The result has the union of all columns in first-seen order. Rows stay
    file-major; a column a file does not have is null for all of that
    file's rows.
    """
    if not frames:
        return pd.DataFrame()

    names: List[str] = []
    dtypes = {}
    for frame in frames:
        for name in frame.columns:
            if name not in dtypes:
                names.append(name)
                dtypes[name] = frame[name].dtype

    aligned = []
    for frame in frames:
        missing = {
            name: pd.Series(pd.NA, index=frame.index, dtype=dtypes[name])
            for name in names
            if name not in frame.columns
        }
        if missing:
            frame = pd.concat([frame, pd.DataFrame(missing, index=frame.index)], axis=1)
        aligned.append(frame[names])

    return pd.concat(aligned, ignore_index=True)
