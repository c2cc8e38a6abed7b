"""Audit trail: append-only JSON Lines with size rotation and a hash chain.

Each line carries ``prev_hash``, the SHA-256 of the previous line, so any
edit or deletion inside a file breaks the chain at a known line.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from briefbot.models import AuditEvent

if TYPE_CHECKING:
    from briefbot.config import Settings


@dataclass
class ChainValidationResult:
    valid: bool
    broken_at_line: int | None = None


def validate_audit_chain(log_path: Path) -> ChainValidationResult:
    """Check the hash chain of a single (unrotated) audit file."""
    lines = [line for line in log_path.read_text(encoding="utf-8").split("\n") if line]
    for i, line in enumerate(lines):
        prev_hash = json.loads(line).get("prev_hash")
        expected = None if i == 0 else hashlib.sha256(lines[i - 1].encode()).hexdigest()
        if prev_hash != expected:
            return ChainValidationResult(valid=False, broken_at_line=i + 1)
    return ChainValidationResult(valid=True)


class AuditLogger:
    """Writes AuditEvents to ``log_path``, rotating to ``.1`` … ``.N``."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._last_line: str | None = None
        if self.log_path.exists():
            lines = [line for line in self.log_path.read_text(encoding="utf-8").split("\n") if line]
            if lines:
                self._last_line = lines[-1]

    @classmethod
    def from_settings(cls, settings: Settings) -> AuditLogger | None:
        if not settings.audit_log_path:
            return None
        return cls(
            log_path=settings.audit_log_path,
            max_bytes=settings.audit_log_max_bytes,
            backup_count=settings.audit_log_backup_count,
        )

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(event.model_dump_json())
        data["prev_hash"] = (
            hashlib.sha256(self._last_line.encode()).hexdigest()
            if self._last_line is not None
            else None
        )
        line = json.dumps(data, separators=(",", ":"), ensure_ascii=False)

        lock_file = self.log_path.parent / f".{self.log_path.name}.lock"
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                if self._maybe_rotate():
                    # A fresh file starts a fresh chain.
                    data["prev_hash"] = None
                    line = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)

        self._last_line = line

    def _maybe_rotate(self) -> bool:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return False

        oldest = self._backup_path(self._backup_count)
        if oldest.exists():
            oldest.unlink()
        for i in range(self._backup_count - 1, 0, -1):
            if self._backup_path(i).exists():
                self._backup_path(i).rename(self._backup_path(i + 1))
        self.log_path.rename(self._backup_path(1))
        return True

    def _backup_path(self, index: int) -> Path:
        return self.log_path.parent / f"{self.log_path.name}.{index}"
