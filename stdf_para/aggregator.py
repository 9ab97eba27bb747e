"""
Aggregator: the single consumer of the record channel.

Results are buffered per (head, site) until the PRR for that site closes
the device, then flushed into the file's columns. Every column of a file
always holds one entry per flushed device.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from .config import ReportOptions
from .diagnostics import DiagnosticKind, Severity
from .records import FTR, HBR, MIR, PIR, PRR, PTR, SBR, SDR, Record
from .state import DeviceRow, FileState
from .workers import Message, RecordMessage, WorkerFinished

logger = logging.getLogger(__name__)

# FTR TEST_FLG of zero means the functional test passed
NO_FAILURE = 0


class Aggregator:

    def __init__(self, options: ReportOptions, file_names: Sequence[str] = ()):
        self.options = options
        self.file_names = list(file_names)
        self.states: Dict[int, FileState] = {}

    def state_for(self, file_id: int) -> FileState:
        state = self.states.get(file_id)
        if state is None:
            name = self.file_names[file_id] if file_id < len(self.file_names) else str(file_id)
            state = FileState(file_id, name)
            self.states[file_id] = state
        return state

    def consume(self, messages: Iterable[Message]) -> None:
        for msg in messages:
            if isinstance(msg, RecordMessage):
                self.handle(msg.file_id, msg.record)
            elif isinstance(msg, WorkerFinished):
                self.worker_finished(msg)

    def worker_finished(self, msg: WorkerFinished) -> None:
        state = self.state_for(msg.file_id)
        if msg.error is None:
            logger.debug("Finished reading %s (%d devices so far)", state.file_name, state.device_count)
            return
        state.decode_error = msg.error
        state.diagnostics.add(
            DiagnosticKind.DECODE_FAILED,
            Severity.ERROR,
            f"stopped reading after {state.device_count} devices: {msg.error}",
        )

    def handle(self, file_id: int, record: Record) -> None:
        state = self.state_for(file_id)

        if isinstance(record, MIR):
            if state.mir is None:
                state.mir = record
            else:
                state.diagnostics.warn(DiagnosticKind.DUPLICATE_HEADER, "extra MIR ignored, keeping the first")

        elif isinstance(record, SDR):
            if state.sdr is None:
                state.sdr = record
            else:
                state.diagnostics.warn(DiagnosticKind.DUPLICATE_HEADER, "extra SDR ignored, keeping the first")

        elif isinstance(record, HBR):
            state.hard_bins.define(record.hbin_num, record.hbin_nam)

        elif isinstance(record, SBR):
            state.soft_bins.define(record.sbin_num, record.sbin_nam)

        elif isinstance(record, PIR):
            pass

        elif isinstance(record, PTR):
            key = self.options.test_key(record.test_num, record.test_txt)
            state.pending_ptrs[(record.head_num, record.site_num)].append((key, record))
            state.limits.observe(record, key)

        elif isinstance(record, FTR):
            key = self.options.test_key(record.test_num, record.test_txt)
            state.pending_ftrs[(record.head_num, record.site_num)].append((key, record))

        elif isinstance(record, PRR):
            self.flush(state, record)

    def flush(self, state: FileState, prr: PRR) -> None:
        """Move the buffered results for the PRR's site into the columns"""
        site = (prr.head_num, prr.site_num)
        device = state.device_count

        for key, ptr in state.pending_ptrs.pop(site, []):
            fresh = state.parametric.put(key, device, ptr.result)
            state.parametric_pass_fail.put(key, device, state.limits.pass_fail(ptr, key))
            if not fresh:
                self._duplicate_result(state, key, prr)

        for key, ftr in state.pending_ftrs.pop(site, []):
            fresh = state.functional.put(key, device, ftr.test_flg)
            state.functional_pass_fail.put(key, device, int(ftr.test_flg == NO_FAILURE))
            if not fresh:
                self._duplicate_result(state, key, prr)

        state.devices.append(DeviceRow(prr.part_id, prr.part_txt, prr.hard_bin, prr.soft_bin))
        state.device_count += 1

        # Tests seen on earlier devices but not on this one still need an entry
        for store in state.stores():
            store.pad(state.device_count)

    @staticmethod
    def _duplicate_result(state: FileState, key: str, prr: PRR) -> None:
        state.diagnostics.warn(
            DiagnosticKind.DUPLICATE_RESULT,
            f"{key!r} ran more than once for part {prr.part_id!r}, keeping the last result",
        )

    def finished_states(self) -> List[FileState]:
        """All file states in input order"""
        return [self.states[file_id] for file_id in sorted(self.states)]
