import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dealership.db.models import Base
from dealership.db.session import SessionLocal, engine, settings
from dealership.errors import DealershipError, StorageFailure
from dealership.routers.analytics_router import router as analytics_router
from dealership.routers.auth_router import router as auth_router
from dealership.routers.bikes_router import router as bikes_router
from dealership.routers.import_router import router as import_router
from dealership.routers.sales_router import router as sales_router
from dealership.routers.users_router import router as users_router
from dealership.services.users import ensure_bootstrap_admin

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_bootstrap_admin(
            db, settings.BOOTSTRAP_ADMIN_EMAIL, settings.BOOTSTRAP_ADMIN_PASSWORD, settings.BOOTSTRAP_ADMIN_NAME
        )
    finally:
        db.close()
    if not settings.GATEWAY_API_KEY:
        logger.warning("GATEWAY_API_KEY is not set, all authenticated requests will be refused")
    logger.info("dealership api ready")
    yield

app = FastAPI(title="Dealership API", lifespan=lifespan)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message}, headers=headers)

@app.exception_handler(DealershipError)
async def dealership_error_handler(request: Request, exc: DealershipError):
    headers = {"Retry-After": "1"} if exc.retryable else None
    return error_response(exc.status_code, exc.message, headers)

@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError):
    logger.error("storage failure on %s %s: %s", request.method, request.url.path, exc.orig)
    failure = StorageFailure("Storage is unavailable, please retry")
    return error_response(failure.status_code, failure.message, {"Retry-After": "1"})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"] if p not in ("body", "query", "path", "header"))
        problems.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return error_response(400, "; ".join(problems) or "Invalid request")

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.get("/")
def root():
    return {"success": True, "data": {"service": "dealership", "status": "ok"}}

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(bikes_router, prefix="/bikes", tags=["bikes"])
app.include_router(sales_router, prefix="/sales", tags=["sales"])
app.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(import_router, prefix="/import", tags=["import"])
