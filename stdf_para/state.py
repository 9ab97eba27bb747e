"""
Per-file aggregation state.

One FileState per input file, owned by the aggregator thread. Columns grow
one entry per device: after every PRR each known column holds exactly
``device_count`` entries, with None where the test did not run.
"""

from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .bins import BinNames
from .diagnostics import DiagnosticLog
from .limits import LimitTable
from .records import FTR, MIR, PTR, SDR

SiteKey = Tuple[int, int]


@dataclass(frozen=True)
class DeviceRow:
    part_id: str
    part_txt: str
    hard_bin: int
    soft_bin: int


class ColumnStore:
    """Test key -> one value per device, keys kept in first-seen order"""

    def __init__(self):
        self.columns: "OrderedDict[str, list]" = OrderedDict()

    def put(self, key: str, device_index: int, value) -> bool:
        """Set the value of ``key`` for device ``device_index``.

        Back-fills None for earlier devices that never ran the test.
        Returns False when the device already had a value for this key
        (the new value replaces it).
        """
        column = self.columns.setdefault(key, [])
        if len(column) < device_index:
            column.extend([None] * (device_index - len(column)))
        if len(column) == device_index:
            column.append(value)
            return True
        column[device_index] = value
        return False

    def pad(self, device_count: int) -> None:
        for column in self.columns.values():
            if len(column) < device_count:
                column.extend([None] * (device_count - len(column)))

    def keys(self):
        return list(self.columns)

    def __getitem__(self, key):
        return self.columns[key]

    def __contains__(self, key):
        return key in self.columns

    def __len__(self):
        return len(self.columns)


class FileState:
    """Everything collected from one file's record stream"""

    def __init__(self, file_id: int, file_name: str):
        self.file_id = file_id
        self.file_name = file_name
        self.diagnostics = DiagnosticLog(file_id, file_name)
        self.mir: Optional[MIR] = None
        self.sdr: Optional[SDR] = None
        self.hard_bins = BinNames("HBIN", self.diagnostics)
        self.soft_bins = BinNames("SBIN", self.diagnostics)
        self.limits = LimitTable(self.diagnostics)
        self.pending_ptrs: Dict[SiteKey, List[Tuple[str, PTR]]] = defaultdict(list)
        self.pending_ftrs: Dict[SiteKey, List[Tuple[str, FTR]]] = defaultdict(list)
        self.parametric = ColumnStore()
        self.parametric_pass_fail = ColumnStore()
        self.functional = ColumnStore()
        self.functional_pass_fail = ColumnStore()
        self.device_count = 0
        self.devices: List[DeviceRow] = []
        self.decode_error: Optional[str] = None

    @property
    def has_header(self) -> bool:
        return self.mir is not None and self.sdr is not None

    def stores(self):
        return (self.parametric, self.parametric_pass_fail, self.functional, self.functional_pass_fail)

    def __repr__(self):
        return f"FileState({self.file_id}, {self.file_name!r}, devices={self.device_count})"
