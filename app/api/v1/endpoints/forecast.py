"""Score forecasting endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.models.errors import ErrorCodes, ErrorResponse, api_error
from app.api.models.requests import ForecastRequest
from app.api.models.responses import ForecastResponse
from app.api.v1.deps import rate_limit
from src.forecast.engine import ForecastEngine
from src.forecast.history import HistoryEntry, ScoreHistory

router = APIRouter(tags=["Forecast"])


@router.post(
    "/forecast",
    response_model=ForecastResponse,
    dependencies=[Depends(rate_limit("query"))],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid request or insufficient history"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Forecast future GEO scores",
    description="""
Fit a trend to past audit scores and project 30/60/90-day forecasts,
what-if scenarios, predictive insights and an estimated AI visibility outlook.

At least two history entries are required.
""",
)
async def forecast_scores(body: ForecastRequest) -> ForecastResponse:
    """Forecast future scores from a score history."""
    history = ScoreHistory(
        HistoryEntry.from_dict(point.model_dump()) for point in body.history
    )
    if body.url:
        history = history.for_url(body.url)
    engine = ForecastEngine(history)
    report = engine.report(body.category_scores)

    if not report.is_ok:
        raise api_error(
            422,
            ErrorCodes.INSUFFICIENT_HISTORY,
            report.message,
            {"data_points": report.data_points},
        )

    data = report.to_dict()
    if body.competitor_average is not None:
        advantage = engine.calculate_competitive_advantage(report.forecasts[-1], body.competitor_average)
        data["competitive_advantage"] = advantage.to_dict()
    return ForecastResponse.model_validate(data)
