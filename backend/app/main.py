import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.config import configure_logging, cors_origins, seed_catalog_on_startup
from backend.app.api.routes.accounts import router as accounts_router
from backend.app.api.routes.aggregates import router as aggregates_router
from backend.app.api.routes.catalog import router as catalog_router
from backend.app.api.routes.config import router as config_router
from backend.app.api.routes.projections import router as projections_router
from backend.app.api.routes.statements import router as statements_router
from backend.app.db import SessionLocal
from backend.app.seed.run import seed_canonical_categories
from backend.app.services.errors import DomainError


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if seed_catalog_on_startup():
        db = SessionLocal()
        try:
            seed_canonical_categories(db)
        finally:
            db.close()
    yield


app = FastAPI(title="Statements API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 404:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(config_router)
app.include_router(catalog_router)
app.include_router(accounts_router)
app.include_router(aggregates_router)
app.include_router(projections_router)
app.include_router(statements_router)
