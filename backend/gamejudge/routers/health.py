from fastapi import APIRouter

from ..models import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])

READY_MESSAGE = "מר פנחס מוכן לעבודה!"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
	return HealthResponse(status="OK", message=READY_MESSAGE)
