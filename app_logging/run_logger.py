import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


def utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class RunLogger:
    """
    Append-only JSONL log of generation calls.

    One JSON object per line: start / end / error events keyed by run_id,
    the agent name and the brief title being worked on.
    Never pass secrets (API keys, auth headers) into input/output.
    """
    log_path: Path
    run_id: str = field(default_factory=new_run_id)

    def _write(self, payload: dict[str, Any]) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")

    def _base(self, agent: str, brief_title: str, event: str, status: str) -> dict[str, Any]:
        return {
            "ts": utc_iso(),
            "run_id": self.run_id,
            "brief_title": brief_title,
            "agent": agent,
            "event": event,
            "status": status,
        }

    def start(self, agent: str, brief_title: str, input: Any) -> None:
        self._write({**self._base(agent, brief_title, "start", "ok"), "input": input})

    def end(self, agent: str, brief_title: str, output: Any, metrics: Optional[dict[str, Any]] = None) -> None:
        self._write({
            **self._base(agent, brief_title, "end", "ok"),
            "output": output,
            "metrics": metrics or {},
        })

    def error(self, agent: str, brief_title: str, input: Any, err: Exception) -> None:
        error: dict[str, Any] = {
            "type": err.__class__.__name__,
            "message": str(err),
        }
        status_code = getattr(err, "status_code", None)
        if status_code is not None:
            error["status_code"] = status_code
        self._write({**self._base(agent, brief_title, "error", "error"), "input": input, "error": error})
