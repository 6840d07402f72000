"""PageDoc API — pure analysis endpoint plus background page diagnoses with SSE progress."""

import asyncio
import json
import uuid
from datetime import datetime

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from pagedoc.core.analyzer import analyze_performance
from pagedoc.core.scanner import PageDocScanner
from pagedoc.models.types import DiagnosisResult
from pagedoc.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(title="PageDoc API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

diagnoses: dict[str, dict] = {}
# Per-diagnosis event queues for SSE streaming
_event_queues: dict[str, list[asyncio.Queue]] = {}
# Finished diagnoses kept for lookup; older ones are evicted
MAX_FINISHED = 100


class NavigationIn(BaseModel):
    requestStart: float = 0
    responseStart: float = 0
    loadEventEnd: float = 0


class ResourceIn(BaseModel):
    name: str = ""
    size: int = 0
    type: str = "other"
    time: float = 0
    humanSize: str = ""


class LongTaskIn(BaseModel):
    duration: float = 0
    startTime: float = 0


class PageMetricsIn(BaseModel):
    longTasks: list[LongTaskIn] = []
    frameworks: list[str] = []
    domNodes: int = 0
    title: str = ""


class AnalyzeRequest(BaseModel):
    navigation: NavigationIn | None = None
    resources: list[ResourceIn] | None = None
    pageMetrics: PageMetricsIn | None = None


class DiagnoseRequest(BaseModel):
    url: str
    viewport: str = "desktop"


class DiagnoseResponse(BaseModel):
    diagnosis_id: str
    status: str
    url: str


@app.get("/health")
def health():
    return {"status": "ok", "service": "pagedoc-api", "version": "0.1.0"}


@app.post("/api/v1/analyze")
def analyze(req: AnalyzeRequest):
    """Score already-collected metrics. No browser involved."""
    report = analyze_performance(
        req.navigation.model_dump() if req.navigation else None,
        [r.model_dump() for r in req.resources or []],
        req.pageMetrics.model_dump() if req.pageMetrics else None,
    )
    return report.to_dict()


@app.post("/api/v1/diagnose", response_model=DiagnoseResponse)
async def start_diagnosis(req: DiagnoseRequest, background_tasks: BackgroundTasks):
    url = req.url.strip()
    if not url.startswith("http"):
        url = f"https://{url}"

    _evict_finished()
    diagnosis_id = str(uuid.uuid4())[:8]

    diagnoses[diagnosis_id] = {
        "diagnosis_id": diagnosis_id,
        "url": url,
        "status": "running",
        "started_at": datetime.now().isoformat(),
        "result": None,
        "error": None,
    }
    _event_queues[diagnosis_id] = []

    background_tasks.add_task(run_diagnosis, diagnosis_id, url, req.viewport)

    return DiagnoseResponse(diagnosis_id=diagnosis_id, status="running", url=url)


@app.get("/api/v1/diagnose/{diagnosis_id}/stream")
async def diagnosis_stream(diagnosis_id: str, request: Request):
    """SSE endpoint that streams live progress events during a diagnosis."""
    if diagnosis_id not in diagnoses:
        raise HTTPException(status_code=404, detail="Diagnosis not found")

    entry = diagnoses[diagnosis_id]
    if entry["status"] != "running":
        # finished runs get their final event and the stream ends
        return _sse_response(_replay_final_event(entry))

    queue: asyncio.Queue = asyncio.Queue()
    _event_queues.setdefault(diagnosis_id, []).append(queue)

    async def event_generator():
        try:
            while True:
                if await request.is_disconnected():
                    break

                try:
                    event = await asyncio.wait_for(queue.get(), timeout=30.0)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue

                if event is None:
                    break

                event_type = event.get("type", "update")
                yield f"event: {event_type}\ndata: {json.dumps(event)}\n\n"

                if event_type in ("diagnosis_complete", "diagnosis_failed"):
                    break
        finally:
            if queue in _event_queues.get(diagnosis_id, []):
                _event_queues[diagnosis_id].remove(queue)

    return _sse_response(event_generator())


@app.get("/api/v1/diagnose/{diagnosis_id}")
async def get_diagnosis(diagnosis_id: str):
    if diagnosis_id not in diagnoses:
        raise HTTPException(status_code=404, detail="Diagnosis not found")

    entry = diagnoses[diagnosis_id]

    if entry["status"] == "completed" and entry["result"]:
        result: DiagnosisResult = entry["result"]
        return {
            "diagnosis_id": diagnosis_id,
            "status": "completed",
            **result.to_dict(),
        }

    return {
        "diagnosis_id": diagnosis_id,
        "status": entry["status"],
        "url": entry["url"],
        "started_at": entry["started_at"],
        "error": entry.get("error"),
    }


@app.get("/api/v1/diagnoses")
async def list_diagnoses():
    return [
        {
            "diagnosis_id": d["diagnosis_id"],
            "url": d["url"],
            "status": d["status"],
            "started_at": d["started_at"],
            "score": d["result"].score if d.get("result") else None,
        }
        for d in diagnoses.values()
    ]


def _sse_response(events) -> StreamingResponse:
    return StreamingResponse(
        events,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


async def _replay_final_event(entry: dict):
    if entry["status"] == "completed" and entry["result"]:
        result: DiagnosisResult = entry["result"]
        event = {
            "type": "diagnosis_complete",
            "score": result.score,
            "issues": len(result.report.issues) if result.report else 0,
            "grade": result.grade,
        }
    else:
        event = {"type": "diagnosis_failed", "error": entry.get("error")}
    yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"


def _evict_finished():
    """Drop the oldest finished diagnoses once more than MAX_FINISHED are kept."""
    finished = [d_id for d_id, d in diagnoses.items() if d["status"] != "running"]
    for d_id in finished[:max(0, len(finished) - MAX_FINISHED)]:
        diagnoses.pop(d_id, None)
        _event_queues.pop(d_id, None)


def _broadcast_event(diagnosis_id: str, event_type: str, data: dict):
    """Push an SSE event to all connected clients for this diagnosis."""
    event = {"type": event_type, **data}
    for q in _event_queues.get(diagnosis_id, []):
        q.put_nowait(event)


async def run_diagnosis(diagnosis_id: str, url: str, viewport: str):
    try:
        def on_progress(event_type: str, data: dict):
            _broadcast_event(diagnosis_id, event_type, data)

        scanner = PageDocScanner(url=url, viewport=viewport, on_progress=on_progress)
        result = await scanner.diagnose()
        diagnoses[diagnosis_id]["status"] = "completed"
        diagnoses[diagnosis_id]["result"] = result
    except Exception as e:
        logger.exception("diagnosis %s of %s failed", diagnosis_id, url)
        diagnoses[diagnosis_id]["status"] = "failed"
        diagnoses[diagnosis_id]["error"] = str(e)[:500]
        _broadcast_event(diagnosis_id, "diagnosis_failed", {"error": str(e)[:500]})

    # Signal end to all SSE listeners; later streams replay the final state
    for q in _event_queues.pop(diagnosis_id, []):
        q.put_nowait(None)
