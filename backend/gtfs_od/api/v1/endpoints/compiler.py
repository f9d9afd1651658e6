"""Compiler endpoints: lower OD restrictions into plain GTFS trips"""

import io
import logging
from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from gtfs_od.api.deps import build_store
from gtfs_od.core.config import settings
from gtfs_od.schemas.compile import CompileRequest, CompileResult
from gtfs_od.services.feed_export_service import write_trips_fragment
from gtfs_od.services.od_compiler import compile_trips

logger = logging.getLogger(__name__)

router = APIRouter()


def _compile(payload: CompileRequest) -> CompileResult:
    store = build_store(payload.stop_times, payload.restrictions)
    return compile_trips(payload.trips, store.index, store, route_ids=payload.route_ids)


@router.post("/compile", response_model=CompileResult)
async def compile_restrictions(payload: CompileRequest) -> CompileResult:
    """
    Compile trips, stop times and restrictions into materialized trips.

    - Trips without custom rules are emitted once with pickup/drop-off flags
    - Trips with custom rules are emitted as __segA, __segB and __bridge
    - stop_sequence is renumbered 1..N on every emitted trip

    Large feeds make this a long synchronous pass, so it runs in a worker thread.
    """
    return await run_in_threadpool(_compile, payload)


@router.post("/export", response_class=StreamingResponse)
async def export_compiled_trips(payload: CompileRequest) -> StreamingResponse:
    """Compile and download the trips.txt / stop_times.txt fragment as a ZIP file."""
    result = await run_in_threadpool(_compile, payload)
    zip_bytes = await run_in_threadpool(write_trips_fragment, result.trips)

    logger.info(
        f"Exported {result.report.trips_out} compiled trips "
        f"({len(zip_bytes)} bytes)"
    )

    return StreamingResponse(
        io.BytesIO(zip_bytes),
        media_type="application/zip",
        headers={
            "Content-Disposition": f"attachment; filename={settings.EXPORT_FILENAME}",
            "Content-Length": str(len(zip_bytes)),
        }
    )
