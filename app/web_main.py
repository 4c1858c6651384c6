from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from adapters.dispatch.asyncio_loop import AsyncioLoopDispatcher
from adapters.layout.column import ColumnLayoutEngine
from app.config import AppSettings
from domain.models import ColumnSize, EventBatch, SolveOutcome
from domain.services.frame_calculation import FrameCalculation, FrameResult

logger = logging.getLogger(__name__)


class LayoutRequest(EventBatch):
    column_width: Optional[float] = Field(default=None, gt=0)
    column_height: Optional[float] = Field(default=None, gt=0)


class RectPayload(BaseModel):
    x: float
    y: float
    width: float
    height: float


class LayoutResponse(BaseModel):
    outcome: str
    frames: Dict[int, RectPayload]


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title="Event Frame Layout")
    app.state.settings = settings
    engine = ColumnLayoutEngine(settings.layout.to_layout_config())

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/layout", response_model=LayoutResponse)
    async def compute_layout(payload: LayoutRequest) -> Any:
        column = ColumnSize(
            width=payload.column_width or settings.layout.column_width,
            height=payload.column_height or settings.layout.column_height,
        )
        loop = asyncio.get_running_loop()
        delivered: asyncio.Future[FrameResult] = loop.create_future()

        def on_result(_job: FrameCalculation, result: FrameResult) -> None:
            delivered.set_result(result)

        calculation = FrameCalculation(column, engine, AsyncioLoopDispatcher(loop))
        worker = calculation.start(payload.by_id(), on_result)
        try:
            # The worker returns only after on_result has run on this loop.
            await asyncio.wrap_future(worker)
        except asyncio.CancelledError:
            calculation.cancel()
            raise
        result = delivered.result()

        if result is None or calculation.solution is None:
            raise HTTPException(status_code=409, detail="Layout calculation was cancelled")
        outcome = calculation.solution.outcome
        if outcome in (SolveOutcome.EXHAUSTED, SolveOutcome.TIMED_OUT):
            logger.info("Returning best-effort layout for %d events", len(result))
        return {
            "outcome": outcome.value,
            "frames": {event_id: rect.to_dict() for event_id, rect in result.items()},
        }

    return app
