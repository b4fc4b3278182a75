from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from db.database import create_db_and_tables
from core.errors import ConcurrencyConflict, PersistenceError, StoreValidationError
from core.logging import configure_logging
from routers.categories import router as categories_router
from routers.products import router as products_router
from routers.stores import router as stores_router
from contextlib import asynccontextmanager

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Generic Store API",
    description="API for browsing products, restocking stores and booking stock",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreValidationError)
async def validation_error_handler(request: Request, exc: StoreValidationError):
    logger.warning(
        "request_rejected",
        path=request.url.path,
        reasons=[code.value for code in exc.codes],
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "reasons": [r.to_dict() for r in exc.reasons]},
    )


@app.exception_handler(ConcurrencyConflict)
async def concurrency_conflict_handler(request: Request, exc: ConcurrencyConflict):
    logger.warning("request_conflict", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The request conflicted with a concurrent update, please retry", "retryable": True},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "retryable": False},
    )


app.include_router(categories_router, prefix="/categories", tags=["categories"])
app.include_router(products_router, prefix="/products", tags=["products"])
app.include_router(stores_router, prefix="/store", tags=["stores"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
