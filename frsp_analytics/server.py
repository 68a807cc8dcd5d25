# frsp_analytics/server.py
"""
Read-only HTTP surface over the derived views.

Both tables are loaded once at start-up; every request only reads them.

Usage:
    uvicorn frsp_analytics.server:app --port 8000
    FRSP_DATA_DIR=public/data python -m frsp_analytics.server
"""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Literal, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from frsp_analytics import correlation
from frsp_analytics.data_loading import Dataset, load_dataset
from frsp_analytics.errors import DataLoadError, SelectionError
from frsp_analytics.schemas import (
    AssessmentViewOut,
    AttendanceViewOut,
    CorrelationOut,
    DashboardOut,
    SelectionOptions,
)
from frsp_analytics.views import (
    Selection,
    available_sections,
    available_years,
    build_assessment_view,
    build_attendance_view,
    build_dashboard_view,
)

logger = logging.getLogger(__name__)


def create_app(dataset: Optional[Dataset] = None, data_dir: Optional[str] = None) -> FastAPI:
    """
    Build the API. With no `dataset`, the JSON files under `data_dir`
    (default: config.DATA_DIR) are loaded when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.dataset is None:
            app.state.dataset = load_dataset(data_dir)
        yield

    app = FastAPI(title="FRSP Analytics API", lifespan=lifespan)
    app.state.dataset = dataset

    def data() -> Dataset:
        if app.state.dataset is None:
            raise DataLoadError("Dataset not loaded")
        return app.state.dataset

    # views are recomputed per selection; memoized on the selection only
    @lru_cache(maxsize=128)
    def assessment_view(selection: Selection, sort_by: str, descending: bool):
        view = build_assessment_view(data().students, selection, sort_by, descending)
        return AssessmentViewOut.model_validate(view)

    @lru_cache(maxsize=128)
    def attendance_view(selection: Selection):
        view = build_attendance_view(data().students, data().batches, selection)
        return AttendanceViewOut.model_validate(view)

    @lru_cache(maxsize=1)
    def dashboard_view():
        return DashboardOut.model_validate(build_dashboard_view(data().students, data().batches))

    @app.exception_handler(SelectionError)
    async def selection_error(request: Request, exc: SelectionError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(DataLoadError)
    async def data_error(request: Request, exc: DataLoadError):
        logger.error(f"Data unavailable: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/api/health")
    def health():
        ds = data()
        return {"status": "ok", "students": len(ds.students), "batches": len(ds.batches)}

    @app.get("/api/selection/options", response_model=SelectionOptions)
    def selection_options(year: str = ""):
        students = data().students
        return SelectionOptions(years=available_years(students),
                                sections=available_sections(students, year) if year else [])

    @app.get("/api/dashboard", response_model=DashboardOut)
    def dashboard():
        return dashboard_view()

    @app.get("/api/attendance", response_model=AttendanceViewOut)
    def attendance(year: str = "", section: str = ""):
        return attendance_view(Selection(year=year, section=section))

    @app.get("/api/assessment", response_model=AssessmentViewOut)
    def assessment(year: str = "", section: str = "",
                   sort_by: Literal["name", "regNo", "total"] = "regNo",
                   order: Literal["asc", "desc"] = Query("asc")):
        return assessment_view(Selection(year=year, section=section), sort_by, order == "desc")

    @app.get("/api/correlation", response_model=CorrelationOut)
    def correlation_view():
        ds = data()
        result = correlation.correlate(ds.students, ds.batches)
        return CorrelationOut.model_validate({
            "pairs": result.pairs,
            "correlation": result.correlation,
            "score_by_attendance": correlation.score_by_attendance_band(result.pairs),
            "trend": correlation.attendance_trend(result.pairs),
        }, from_attributes=True)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    from frsp_analytics.config import setup_logging

    setup_logging()
    uvicorn.run(app, port=8000)
