# app/api/api_v1/api.py
from fastapi import APIRouter

from app.api.api_v1.routers import (
    admins,
    auth,
    farmers,
    reports,
    requests,
    stock,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(admins.router)
api_router.include_router(farmers.router)
api_router.include_router(stock.router)
api_router.include_router(requests.router)
api_router.include_router(reports.router)
