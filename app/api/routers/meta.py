from fastapi import APIRouter

from app.core.limiter import limiter

router = APIRouter(tags=["meta"])


@router.get("/", summary="Service banner")
@limiter.exempt
async def root() -> dict:
    return {"message": "Microloan Server is Running Fine"}
