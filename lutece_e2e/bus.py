"""Cross-phase bus for identifiers produced by one phase and consumed by later ones.

Each key is backed by a small UTF-8 file under the working directory so that a
phase can be run on its own (``--phase forms_submission``) after an earlier run
produced the values. Within one process the published values are also kept in
memory and take precedence over the files.

Known keys:
- ``run_suffix`` -> ``test-run-suffix.txt`` (default ``"0"``)
- ``form_id``    -> ``test-form-id.txt``    (default ``"1"``)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusKey:
    """One published identifier and its documented fallback."""
    name: str
    filename: str
    default: str


RUN_SUFFIX = BusKey("run_suffix", "test-run-suffix.txt", "0")
FORM_ID = BusKey("form_id", "test-form-id.txt", "1")

KNOWN_KEYS: Dict[str, BusKey] = {key.name: key for key in (RUN_SUFFIX, FORM_ID)}


class PhaseBus:
    """Write-once-per-key store shared by the phases of one run.

    Readers never fail: an absent, unreadable or empty file yields the key's
    default. Writers never fail on I/O either; the value is still visible to
    readers in this process.
    """

    def __init__(self, work_dir: Path) -> None:
        self.work_dir = Path(work_dir)
        self._published: Dict[str, str] = {}

    def path_for(self, key: str) -> Path:
        return self.work_dir / self._lookup(key).filename

    def read(self, key: str) -> str:
        bus_key = self._lookup(key)
        if key in self._published:
            return self._published[key]
        try:
            value = self.path_for(key).read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return bus_key.default
        return value or bus_key.default

    def publish(self, key: str, value: str) -> None:
        self._lookup(key)
        if key in self._published:
            raise ValueError(
                f"Bus key '{key}' already published in this run "
                f"(current={self._published[key]!r}, attempted={value!r})"
            )
        value = str(value).strip()
        self._published[key] = value
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
            self.path_for(key).write_text(value, encoding="utf-8")
        except OSError as exc:
            logger.debug("Could not persist bus key %s to %s: %s", key, self.work_dir, exc)
            return
        logger.info("Published %s=%s", key, value)

    def is_published(self, key: str) -> bool:
        self._lookup(key)
        return key in self._published

    @staticmethod
    def _lookup(key: str) -> BusKey:
        try:
            return KNOWN_KEYS[key]
        except KeyError:
            raise KeyError(f"Unknown bus key '{key}' (known: {', '.join(sorted(KNOWN_KEYS))})") from None
