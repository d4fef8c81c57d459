from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from smart_pantry.config import Settings
from smart_pantry.services.exceptions import RepoError
from smart_pantry.services.repo.json_repo import _locked  # reuse existing cross-platform lock

logger = logging.getLogger(__name__)


class MetricsLogger:
    """Append-only JSONL logger for latency metrics under the data dir.

    One JSON object per line:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: short name (e.g., "suggest_generate", "suggest_render")
      - origin: "backend" | "frontend"
      - duration_ms: float
      - extra: optional dict with contextual fields
    """

    def __init__(self, settings: Optional[Settings] = None, filename: str = "latency_log.jsonl") -> None:
        self.settings = settings or Settings()
        self.path = os.path.join(self.settings.data_dir, filename)

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        origin: str,
        extra: Optional[Dict[str, Any]] = None,
        corr_id: Optional[str] = None,
    ) -> None:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "kind": "latency",
            "name": name,
            "origin": origin,
            "duration_ms": float(duration_ms),
        }
        if corr_id:
            entry["corr"] = corr_id
        if extra:
            entry["extra"] = extra
        try:
            line = (json.dumps(entry, ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, TypeError, ValueError, RepoError) as e:
            # Metrics should never impact user flows.
            logger.debug("Latency metric %s not recorded: %s", name, e)
