"""DuoReport — Source Configuration Routes."""

from fastapi import APIRouter, Depends

from duoreport.api.deps import get_settings
from duoreport.config import Settings

router = APIRouter(tags=["Sources"])


@router.get("/sources")
async def get_sources(config: Settings = Depends(get_settings)):
    """Which platforms are configured. Never returns secrets."""
    return {
        "status": "success",
        "credentials_complete": config.credentials_complete,
        "allowed_lookback_days": config.allowed_lookback_days,
        "default_lookback_days": config.default_lookback_days,
        "platforms": {
            "meta": {
                "configured": config.meta_configured,
                "api_version": config.meta_api_version,
                "conversion_event": config.meta_conversion_action,
            },
            "tiktok": {
                "configured": config.tiktok_configured,
                "api_version": config.tiktok_api_version,
                "conversion_event": config.tiktok_conversion_metric,
            },
        },
    }
