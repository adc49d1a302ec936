# Overview: Durable receipt storage; text and JSON snapshot files with bounded retry on I/O failure.

"""
File layout (one pair per receipt, inside StoreConfig.receipt_output_dir):

    receipt_<N>.txt    human-readable rendering ("Receipt #<N>", cashier,
                       one line per item, total)
    receipt_<N>.json   snapshot of Receipt.to_dict(); reloads to an equal
                       Receipt

Retry policy:
- Every write and read is attempted up to max_retry_attempts times with a
  fixed retry_delay between attempts, on OSError.
- A missing snapshot (ReceiptNotFoundError) and an undecodable snapshot
  (ReceiptDecodeError) are not transient and are raised at once.
- After the last attempt ReceiptPersistenceError is raised, chained to
  the last underlying failure.

This service never holds a store lock; the retry sleeps block only the
calling thread.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable

from ..config import StoreConfig
from ..models import Receipt
from ..validation import StoreError
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


class ReceiptPersistenceError(StoreError):
    """Raised when receipt storage fails after the retry budget is spent."""


class ReceiptNotFoundError(ReceiptPersistenceError):
    """No stored snapshot for the requested receipt."""


class ReceiptDecodeError(ReceiptPersistenceError):
    """A stored snapshot exists but cannot be turned back into a Receipt."""


class ReceiptPersistence:
    def __init__(self, config: StoreConfig, sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.output_dir = Path(config.receipt_output_dir)
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def text_path(self, receipt_number: int) -> Path:
        return self.output_dir / f"receipt_{receipt_number}.txt"

    def snapshot_path(self, receipt_number: int) -> Path:
        return self.output_dir / f"receipt_{receipt_number}.json"

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, receipt: Receipt) -> None:
        """Write both files for ``receipt``; raises ReceiptPersistenceError on exhaustion."""
        self.ensure_directory()

        text = receipt.render_text(self.config.currency)
        snapshot = json.dumps(receipt.to_dict(), indent=2, sort_keys=True)

        self._retrying(
            lambda: self._write_atomic(self.text_path(receipt.number), text),
            f"Failed to save receipt #{receipt.number} as text",
        )
        self._retrying(
            lambda: self._write_atomic(self.snapshot_path(receipt.number), snapshot),
            f"Failed to save receipt #{receipt.number} snapshot",
        )
        logger.debug("Receipt #%s written to %s", receipt.number, self.output_dir)

    def ensure_directory(self) -> None:
        if self.output_dir.is_dir():
            return

        if not self.config.create_missing_directories:
            message = f"Directory does not exist: {self.output_dir}"
            if self.config.fail_on_directory_error:
                raise ReceiptPersistenceError(message, details={"path": str(self.output_dir)})
            logger.warning("%s; continuing", message)
            return

        try:
            run_with_retry(
                lambda: self.output_dir.mkdir(parents=True, exist_ok=True),
                attempts=self.config.max_retry_attempts,
                delay=self.config.retry_delay,
                description=f"create {self.output_dir}",
                sleep=self._sleep,
            )
        except OSError as exc:
            message = f"Failed to create directory after {self.config.max_retry_attempts} attempts: {self.output_dir}"
            if self.config.fail_on_directory_error:
                raise ReceiptPersistenceError(message, details={"path": str(self.output_dir)}) from exc
            logger.warning("%s (%s); continuing", message, exc)

    def _write_atomic(self, path: Path, data: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load_receipt(self, receipt_number: int) -> Receipt:
        return self.load(self.snapshot_path(receipt_number))

    def load(self, path: str | os.PathLike) -> Receipt:
        path = Path(path)
        raw = self._retrying(
            lambda: self._read(path),
            f"Failed to load receipt snapshot {path}",
            reading=True,
        )
        try:
            return Receipt.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, StoreError) as exc:
            raise ReceiptDecodeError(
                f"Receipt snapshot is corrupt: {path}",
                details={"path": str(path)},
            ) from exc

    def read_text(self, receipt_number: int) -> str:
        path = self.text_path(receipt_number)
        return self._retrying(
            lambda: self._read(path),
            f"Failed to read receipt text {path}",
            reading=True,
        )

    def _read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    # ------------------------------------------------------------------

    def _retrying(self, op, message: str, reading: bool = False):
        # A missing file on read is final; on write it is an I/O failure like any other
        try:
            return run_with_retry(
                op,
                attempts=self.config.max_retry_attempts,
                delay=self.config.retry_delay,
                give_up_on=(FileNotFoundError,) if reading else (),
                description=message,
                sleep=self._sleep,
            )
        except OSError as exc:
            if reading and isinstance(exc, FileNotFoundError):
                raise ReceiptNotFoundError(
                    f"Receipt file not found: {exc.filename}",
                    details={"path": exc.filename},
                ) from exc
            raise ReceiptPersistenceError(
                f"{message} after {self.config.max_retry_attempts} attempts: {exc}",
                details={"attempts": self.config.max_retry_attempts},
            ) from exc
