from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CallLogPaths:
    run_id: str
    jsonl_path: Path


def make_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def init_call_log(log_dir: Path, run_id: str | None = None) -> CallLogPaths:
    run_id = run_id or make_run_id()
    log_dir.mkdir(parents=True, exist_ok=True)
    return CallLogPaths(run_id=run_id, jsonl_path=log_dir / f"calls_{run_id}.jsonl")


def append_call(paths: CallLogPaths, record: dict[str, Any]) -> None:
    """
    Append one dispatch record as a JSON line.

    Records carry metadata only (contract, model, outcome, timings, usage);
    message contents never reach the log.
    """
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "run_id": paths.run_id,
    }
    payload.update(record)
    with paths.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
        f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")


def read_calls(paths: CallLogPaths) -> list[dict[str, Any]]:
    if not paths.jsonl_path.exists():
        return []
    with paths.jsonl_path.open(encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
