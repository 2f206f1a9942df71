from datetime import datetime, timezone

from fastapi import APIRouter

from app.schemas_pkg import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/", response_model=HealthResponse)
def health():
    return {
        "status": "healthy",
        "message": "Razorpay API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
