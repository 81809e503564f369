# File: site_mirror/aggregator.py
"""site_mirror.aggregator: Итоговый отчёт о запуске зеркалирования."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, TypedDict

from site_mirror.crawler.models import ResourceKind


class ResourceInfo(TypedDict):
    """Сохранённый ресурс."""

    url: str
    path: str
    kind: str
    size: int


class FailureInfo(TypedDict):
    """Ресурс, который не удалось сохранить."""

    url: str
    error: str
    reason: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(slots=True)
class MirrorReport:
    """Результаты зеркалирования: сохранённые файлы и ошибки по каждому URL."""

    seed_url: str
    output_dir: str
    resources: List[ResourceInfo] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)
    started_at: str = field(default_factory=_now)
    finished_at: str | None = None
    duration: float = 0.0

    def add_resource(self, url: str, path: str, kind: ResourceKind, size: int) -> None:
        self.resources.append({"url": url, "path": path, "kind": kind.value, "size": size})

    def add_failure(self, url: str, exc: BaseException) -> None:
        error = getattr(exc, "kind", "internal")
        reason = getattr(exc, "reason", None) or str(exc) or exc.__class__.__name__
        self.failures.append({"url": url, "error": error, "reason": reason})

    def finish(self, duration: float) -> None:
        self.duration = round(duration, 3)
        self.finished_at = _now()

    @property
    def ok(self) -> bool:
        """True, если ни один ресурс не завершился ошибкой."""
        return not self.failures

    def summary(self) -> Dict[str, Any]:
        """Короткая сводка для CLI и HTML-отчёта."""
        by_kind: Dict[str, int] = {}
        for res in self.resources:
            by_kind[res["kind"]] = by_kind.get(res["kind"], 0) + 1
        return {
            "seed_url": self.seed_url,
            "output_dir": self.output_dir,
            "saved": len(self.resources),
            "failed": len(self.failures),
            "bytes": sum(res["size"] for res in self.resources),
            "by_kind": by_kind,
            "duration": self.duration,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
