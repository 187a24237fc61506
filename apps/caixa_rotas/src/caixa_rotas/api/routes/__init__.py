"""API v1 router registration."""

from fastapi import APIRouter

from caixa_rotas.api.routes import (
    closings,
    expenses,
    readings,
    shareholders,
    summaries,
)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(shareholders.router)
v1_router.include_router(readings.router)
v1_router.include_router(readings.operators_router)
v1_router.include_router(expenses.router)
v1_router.include_router(summaries.router)
v1_router.include_router(closings.router)
