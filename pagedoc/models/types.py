import math
from collections.abc import Mapping, Set
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Impact(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _IMPACT_RANK[self]


_IMPACT_RANK = {Impact.HIGH: 3, Impact.MEDIUM: 2, Impact.LOW: 1}


class ResourceType(str, Enum):
    IMAGE = "image"
    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    FONT = "font"
    OTHER = "other"

    @classmethod
    def coerce(cls, value) -> "ResourceType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


def _num(value) -> float:
    """Coerce an optional numeric field; absent, malformed or non-finite values become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _pick(data: Mapping, *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class NavigationTiming:
    request_start: float = 0.0
    response_start: float = 0.0
    load_event_end: float = 0.0

    @property
    def ttfb(self) -> float:
        return self.response_start - self.request_start

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "NavigationTiming":
        data = data or {}
        return cls(
            request_start=_num(_pick(data, "requestStart", "request_start")),
            response_start=_num(_pick(data, "responseStart", "response_start")),
            load_event_end=_num(_pick(data, "loadEventEnd", "load_event_end")),
        )

    def to_dict(self) -> dict:
        return {
            "requestStart": self.request_start,
            "responseStart": self.response_start,
            "loadEventEnd": self.load_event_end,
        }


@dataclass
class ResourceEntry:
    name: str
    size: int = 0
    type: ResourceType = ResourceType.OTHER
    time: float = 0.0
    human_size: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "ResourceEntry":
        return cls(
            name=str(_pick(data, "name", "url", default="")),
            size=int(_num(data.get("size"))),
            type=ResourceType.coerce(data.get("type")),
            time=_num(data.get("time")),
            human_size=str(_pick(data, "humanSize", "human_size", default="")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "size": self.size,
            "type": self.type.value,
            "time": self.time,
            "humanSize": self.human_size,
        }


@dataclass
class LongTask:
    duration: float
    start_time: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping) -> "LongTask":
        return cls(
            duration=_num(data.get("duration")),
            start_time=_num(_pick(data, "startTime", "start_time")),
        )

    def to_dict(self) -> dict:
        return {"duration": self.duration, "startTime": self.start_time}


@dataclass
class PageMetrics:
    long_tasks: list[LongTask] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    dom_nodes: int = 0
    title: str = ""

    @property
    def total_blocking_time(self) -> float:
        return sum(t.duration for t in self.long_tasks)

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "PageMetrics":
        data = data or {}
        tasks = _pick(data, "longTasks", "long_tasks", default=[])
        labels = [str(label) for label in _pick(data, "frameworks", default=[])]
        # sets carry no order of their own
        if isinstance(data.get("frameworks"), Set):
            labels.sort()
        frameworks: list[str] = []
        for label in labels:
            if label not in frameworks:
                frameworks.append(label)
        return cls(
            long_tasks=[t if isinstance(t, LongTask) else LongTask.from_dict(t) for t in tasks],
            frameworks=frameworks,
            dom_nodes=int(_num(_pick(data, "domNodes", "dom_nodes"))),
            title=str(_pick(data, "title", default="")),
        )

    def to_dict(self) -> dict:
        return {
            "longTasks": [t.to_dict() for t in self.long_tasks],
            "frameworks": list(self.frameworks),
            "domNodes": self.dom_nodes,
            "title": self.title,
        }


@dataclass
class Issue:
    id: str
    title: str
    impact: Impact
    save: str
    explanation: str
    fix: str
    technical: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "impact": self.impact.value,
            "save": self.save,
            "explanation": self.explanation,
            "fix": self.fix,
            "technical": self.technical,
        }


@dataclass
class Report:
    score: int
    issues: list[Issue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"score": self.score, "issues": [i.to_dict() for i in self.issues]}


@dataclass
class DiagnosisResult:
    url: str
    viewport: str = "desktop"
    report: Report | None = None
    navigation: NavigationTiming = field(default_factory=NavigationTiming)
    resources: list[ResourceEntry] = field(default_factory=list)
    page_metrics: PageMetrics = field(default_factory=PageMetrics)
    errors: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None

    @property
    def load_time_ms(self) -> float:
        return self.navigation.load_event_end

    @property
    def total_bytes(self) -> int:
        return sum(r.size for r in self.resources)

    @property
    def total_blocking_ms(self) -> float:
        return self.page_metrics.total_blocking_time

    @property
    def score(self) -> int | None:
        return self.report.score if self.report else None

    @property
    def grade(self) -> str:
        return grade_for(self.score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "viewport": self.viewport,
            "score": self.score,
            "grade": self.grade,
            "issues": [i.to_dict() for i in self.report.issues] if self.report else [],
            "stats": {
                "load_time_ms": self.load_time_ms,
                "total_bytes": self.total_bytes,
                "total_blocking_ms": self.total_blocking_ms,
                "resource_count": len(self.resources),
                "dom_nodes": self.page_metrics.dom_nodes,
                "frameworks": list(self.page_metrics.frameworks),
                "title": self.page_metrics.title,
            },
            "navigation": self.navigation.to_dict(),
            "errors": self.errors,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def grade_for(score: int | None) -> str:
    if score is None:
        return "?"
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 60:
        return "C"
    return "F"
