from __future__ import annotations
import json, time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List
if TYPE_CHECKING:  # pragma: no cover
    from .registry import NotificationReport
    from .substitutability import SubstitutabilityReport
class TraceSink:
    """Appends notification and substitutability reports to a JSON-lines file."""
    def __init__(self, path: str = "./trace/capkit.jsonl"):
        self.path = Path(path); self.path.parent.mkdir(parents=True, exist_ok=True)
    def handle(self, msg: Dict[str, Any]) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps({"ts": time.time(), **msg})+"\n")
    def record_notification(self, report: "NotificationReport") -> None:
        self.handle({"type": "notification", **report.to_dict()})
    def record_check(self, report: "SubstitutabilityReport") -> None:
        self.handle({"type": "substitutability", **report.to_dict()})
    def read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
