import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import build_engine, create_db_and_tables
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.notifications import ChangeFeed
from app.routes import (
    backup,
    health,
    order_items,
    orders,
    payments,
    sales,
    tables,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables(app.state.engine)
    yield


def create_app(engine=None, change_feed=None) -> FastAPI:
    app = FastAPI(title="Restaurant POS Orders API", lifespan=lifespan)

    app.state.engine = engine or build_engine()
    app.state.change_feed = change_feed or ChangeFeed()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://localhost:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:8000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    app.include_router(orders.router, prefix="/orders", tags=["Orders"])
    app.include_router(order_items.router, prefix="/orders", tags=["Order Items"])
    app.include_router(tables.router, prefix="/tables", tags=["Tables"])
    app.include_router(payments.router, prefix="/payments", tags=["Payments"])
    app.include_router(sales.router, prefix="/sales", tags=["Sales"])
    app.include_router(backup.router, prefix="/backup", tags=["Backup"])
    app.include_router(health.router, prefix="/health", tags=["Health"])

    @app.get("/")
    def root():
        return {"message": "Restaurant POS Orders API is running"}

    return app


app = create_app()
