import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from pydantic_settings import BaseSettings, SettingsConfigDict

from dealership.errors import StorageFailure

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str
    DB_TIMEOUT_SECONDS: float = 10.0
    LOG_LEVEL: str = "INFO"
    GATEWAY_API_KEY: str | None = None
    ENFORCE_UNIQUE_REGISTRATION: bool = False
    BOOTSTRAP_ADMIN_EMAIL: str | None = None
    BOOTSTRAP_ADMIN_PASSWORD: str | None = None
    BOOTSTRAP_ADMIN_NAME: str = "Administrator"
    IMPORT_ERROR_DIR: str = "tmp/error_reports"

settings = Settings()


def engine_options(url: str, timeout: float) -> dict:
    # every wait on the store of record is bounded so callers see a StorageFailure instead of hanging
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return {"connect_args": {"timeout": timeout, "check_same_thread": False}}
    options = {"pool_timeout": timeout}
    if backend == "postgresql":
        options["connect_args"] = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)} -c lock_timeout={int(timeout * 1000)}",
        }
    return options

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    **engine_options(settings.DATABASE_URL, settings.DB_TIMEOUT_SECONDS),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Run a unit of work: commit on success, roll back on any error.

    Driver-level failures (unreachable server, lock or statement timeouts)
    surface as StorageFailure so the caller knows a retry is safe.
    """
    try:
        yield db
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error("storage failure, transaction rolled back: %s", e.orig)
        raise StorageFailure("Storage is unavailable, please retry") from e
    except Exception:
        db.rollback()
        raise
