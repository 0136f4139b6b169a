"""JSONL log of past reconciliation runs."""

import json
import logging
from pathlib import Path

from filectl.core.paths import ensure_state_dir, get_state_dir
from filectl.models.history import RunRecord

logger = logging.getLogger(__name__)


class RunHistory:
    """Runs that emitted events or failures, one JSON object per line.

    Lines are only ever appended. A line that cannot be parsed is logged
    and skipped so one bad write does not hide the rest of the log.

    Example:
        >>> history = RunHistory(tmp_path)
        >>> history.record(create_run_record(report))
        >>> [r.failures for r in history.get_history(limit=1)]
        [0]
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        self._state_dir = state_dir
        self.history_path = (state_dir or get_state_dir()) / self.HISTORY_FILENAME

    def record(self, record: RunRecord) -> None:
        """Append ``record``, creating the state directory on first use.

        Raises:
            RuntimeError: The default state directory cannot be created.
            OSError: The log cannot be written.
        """
        if self._state_dir is None:
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.history_path.open("a", encoding="utf-8") as f:
            print(record.to_json_line(), file=f)

    def _iter_records(self) -> list[RunRecord]:
        try:
            lines = self.history_path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []

        records: list[RunRecord] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                records.append(RunRecord.from_json_line(line))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                logger.warning("Skipping corrupt history line %d: %s", number, e)
        return records

    def get_history(self, limit: int | None = None) -> list[RunRecord]:
        """Recorded runs, newest first, at most ``limit`` of them."""
        records = self._iter_records()[::-1]
        return records if limit is None else records[:limit]

    def get_record(self, record_id: str) -> RunRecord | None:
        """Run whose id is ``record_id`` or starts with it."""
        matches = [r for r in self._iter_records() if r.id.startswith(record_id)]
        exact = [r for r in matches if r.id == record_id]
        if exact:
            return exact[-1]
        return matches[-1] if len(matches) == 1 else None
