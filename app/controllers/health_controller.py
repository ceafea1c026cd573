from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from app.core.database import Database, get_database
from app.schemas.product_schemas import HealthResponse
import structlog

logger = structlog.get_logger()

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Database unreachable"}},
)
async def health_check(database: Database = Depends(get_database)):
    logger.info("Health check requested")
    try:
        await database.ping()
    except Exception as e:
        logger.error("Database health check failed", error_type=type(e).__name__, error=str(e))
        return PlainTextResponse("Service Unavailable", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
