"""
File workers and the shared record channel.

Each input file gets its own thread that decodes the file and pushes
``RecordMessage``s onto one unbounded queue, followed by a single
``WorkerFinished``. The consumer drains the queue while the workers are
still producing. Records from one file arrive in file order; there is no
ordering between files.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

from .decode import DecodeSource
from .records import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordMessage:
    file_id: int
    record: Record


@dataclass(frozen=True)
class WorkerFinished:
    file_id: int
    error: Optional[str] = None


Message = Union[RecordMessage, WorkerFinished]


class FileWorker(threading.Thread):
    """Decodes one file onto the channel"""

    def __init__(self, file_id: int, path: str, decode: DecodeSource, channel: "queue.Queue[Message]"):
        super().__init__(name=f"stdf-worker-{file_id}", daemon=True)
        self.file_id = file_id
        self.path = path
        self._decode = decode
        self._channel = channel
        self.sent = 0

    def run(self) -> None:
        error = None
        try:
            for record in self._decode(self.path):
                self._channel.put(RecordMessage(self.file_id, record))
                self.sent += 1
        except Exception as e:
            # Whatever was sent before the failure stays valid
            error = f"{type(e).__name__}: {e}"
            logger.error("Error processing file %s: %s", self.path, e)
            logger.debug("Decode failure in %s", self.path, exc_info=True)
        finally:
            self._channel.put(WorkerFinished(self.file_id, error))
        logger.debug("Worker for %s sent %d records", self.path, self.sent)


def iter_messages(paths: Sequence[str], decode: DecodeSource) -> Iterator[Message]:
    """Start one worker per path and yield their messages as they arrive.

    The generator ends once every worker has reported ``WorkerFinished``.
    """
    channel: "queue.Queue[Message]" = queue.Queue()
    workers: List[FileWorker] = [
        FileWorker(file_id, path, decode, channel) for file_id, path in enumerate(paths)
    ]
    for worker in workers:
        worker.start()

    remaining = len(workers)
    try:
        while remaining:
            msg = channel.get()
            if isinstance(msg, WorkerFinished):
                remaining -= 1
            yield msg
    finally:
        for worker in workers:
            worker.join()
