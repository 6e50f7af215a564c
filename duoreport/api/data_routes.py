"""DuoReport — Live Data Routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from duoreport.analyzer.reconciler import Reconciler
from duoreport.api.deps import get_reconciler, get_settings
from duoreport.config import Settings
from duoreport.core.dates import normalize_lookback
from duoreport.core.errors import ConfigurationError, RangeError
from duoreport.core.logging import get_logger
from duoreport.models.metrics_models import FlatDailyRecord, SourceStatus

logger = get_logger("api.data")

router = APIRouter(prefix="/api", tags=["Data"])

CACHE_CONTROL = "s-maxage=300, stale-while-revalidate"


class LiveDataResponse(BaseModel):
    """Response for GET /api/live-data."""

    status: str = "success"
    lookback_days: int
    date_range_start: str
    date_range_end: str
    sources: List[SourceStatus]
    data: List[FlatDailyRecord]


@router.get("/live-data", response_model=LiveDataResponse)
async def get_live_data(
    response: Response,
    days: Optional[str] = Query(None, description="Lookback window: 90 or 365"),
    config: Settings = Depends(get_settings),
    reconciler: Reconciler = Depends(get_reconciler),
):
    """Daily Meta + TikTok performance with derived ratios, newest day first.

    Any other `days` value falls back to the default window. A platform that
    is down is zero-filled and reported under `sources`.
    """
    try:
        if not config.credentials_complete:
            raise ConfigurationError(config.missing_credentials())

        lookback = normalize_lookback(
            days, config.allowed_lookback_days, config.default_lookback_days
        )
        table = await reconciler.reconcile(lookback)
    except ConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=503, detail="Service Unavailable: API credentials missing."
        )
    except RangeError as e:
        logger.error(f"Invalid reporting window: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Live data failed: {e}")
        raise HTTPException(status_code=500, detail=f"Server error: {str(e)}")

    response.headers["Cache-Control"] = CACHE_CONTROL
    return LiveDataResponse(
        lookback_days=table.lookback_days,
        date_range_start=table.date_range_start,
        date_range_end=table.date_range_end,
        sources=table.sources,
        data=table.rows(),
    )
