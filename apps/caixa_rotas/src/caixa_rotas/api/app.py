"""FastAPI app bootstrap for caixa_rotas."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from caixa_rotas.api.error_handlers import register_error_handlers
from caixa_rotas.api.routes import v1_router
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.session import get_db_session


def create_app() -> FastAPI:
    """Create and configure FastAPI application instance."""

    app = FastAPI(
        title="Caixa Rotas API",
        description="Readings, expenses and monthly profit closing of vending routes.",
        version="0.1.0",
    )

    @app.get("/health/live", include_in_schema=False)
    def health_live() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/health/ready", include_in_schema=False)
    def health_ready(
        db_session: Annotated[Session, Depends(get_db_session)],
    ) -> dict[str, str]:
        try:
            # Touches the closing lock table so a missing migration is reported.
            db_session.execute(select(MonthlyClosing.id).limit(1))
        except SQLAlchemyError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database or closing schema is unavailable",
            ) from exc
        return {"status": "ready"}

    register_error_handlers(app)
    app.include_router(v1_router)
    return app


app = create_app()
