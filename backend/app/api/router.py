from fastapi import APIRouter

from app.api.balances import balance_router, settings_router
from app.api.submissions import submissions_router
from app.api.weeks import durations_router, weeks_router

api_router = APIRouter()
api_router.include_router(weeks_router)
api_router.include_router(durations_router)
api_router.include_router(submissions_router)
api_router.include_router(balance_router)
api_router.include_router(settings_router)
