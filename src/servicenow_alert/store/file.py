"""
File-backed id store.

One binding per line, ``incident_id<TAB>sys_id``, UTF-8 with LF endings.
Reads are lock-free. Writes take an exclusive advisory lock on a sibling
``.lock`` file, re-read the store under the lock, then append the line and
fsync. An unterminated last line left by a crashed writer is ignored on read
and truncated by the next writer.
"""

from __future__ import annotations

import errno
import fcntl
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

import structlog

from servicenow_alert.core.errors import StoreError, StoreLockTimeout
from servicenow_alert.store.base import IdStore

logger = structlog.get_logger()

SEPARATOR = "\t"
DEFAULT_LOCK_TIMEOUT = 5.0
LOCK_POLL_INTERVAL = 0.05


def parse_line(line: str) -> tuple[str, str] | None:
    """Parse one store record; None for blank or malformed lines."""
    record = line.rstrip("\r\n")
    if SEPARATOR not in record:
        return None
    incident_id, sys_id = record.split(SEPARATOR, 1)
    if not incident_id or not sys_id or SEPARATOR in sys_id:
        return None
    return incident_id, sys_id


def format_line(incident_id: str, sys_id: str) -> str:
    for value in (incident_id, sys_id):
        if not value or any(ch in value for ch in (SEPARATOR, "\n", "\r")):
            raise StoreError(
                "Store keys and values must be non-empty and free of tabs and newlines",
                {"incident_id": incident_id, "sys_id": sys_id},
            )
    return f"{incident_id}{SEPARATOR}{sys_id}\n"


class FileIdStore(IdStore):
    """Id store persisted in a flat TSV file."""

    def __init__(self, path: str | Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout

    def load(self) -> dict[str, str]:
        """Read every binding; a missing file is an empty store."""
        bindings: dict[str, str] = {}
        try:
            with open(self.path, encoding="utf-8") as f:
                for line in f:
                    if not line.endswith("\n"):
                        # Unterminated tail from an interrupted writer.
                        logger.warning("store_torn_record_ignored", path=str(self.path))
                        break
                    parsed = parse_line(line)
                    if parsed is None:
                        if line.strip():
                            logger.debug("store_line_ignored", path=str(self.path))
                        continue
                    incident_id, sys_id = parsed
                    bindings.setdefault(incident_id, sys_id)
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError("Failed to read id store", {"path": str(self.path), "error": str(e)}) from e
        return bindings

    def get(self, incident_id: str) -> str | None:
        return self.load().get(incident_id)

    def put(self, incident_id: str, sys_id: str) -> None:
        line = format_line(incident_id, sys_id)
        with self._locked():
            existing = self.load().get(incident_id)
            if existing is not None:
                logger.info(
                    "store_binding_exists",
                    incident_id=incident_id,
                    sys_id=existing,
                    ignored_sys_id=sys_id,
                )
                return
            try:
                with open(self.path, "a+b") as f:
                    self._truncate_torn_tail(f)
                    f.write(line.encode("utf-8"))
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise StoreError(
                    "Failed to write id store", {"path": str(self.path), "error": str(e)}
                ) from e
        logger.debug("store_binding_written", incident_id=incident_id, sys_id=sys_id)

    def _truncate_torn_tail(self, f: BinaryIO) -> None:
        """Cut the file back to its last complete record. Caller holds the lock."""
        size = f.seek(0, os.SEEK_END)
        if size == 0:
            return
        f.seek(0)
        data = f.read()
        keep = data.rfind(b"\n") + 1
        if keep < size:
            logger.warning(
                "store_torn_record_truncated",
                path=str(self.path),
                dropped=data[keep:].decode("utf-8", "replace"),
            )
            f.truncate(keep)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise StoreError(
                "Failed to open id store lock", {"path": str(self.lock_path), "error": str(e)}
            ) from e
        try:
            self._acquire(fd)
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def _acquire(self, fd: int) -> None:
        deadline = time.monotonic() + self.lock_timeout
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except OSError as e:
                if e.errno not in (errno.EAGAIN, errno.EACCES, errno.EWOULDBLOCK):
                    raise StoreError(
                        "Failed to lock id store", {"path": str(self.lock_path), "error": str(e)}
                    ) from e
            if time.monotonic() >= deadline:
                raise StoreLockTimeout(
                    "Timed out waiting for id store lock",
                    {"path": str(self.lock_path), "timeout": self.lock_timeout},
                )
            time.sleep(LOCK_POLL_INTERVAL)
