"""Database session and engine management."""

from collections.abc import Generator

from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()

settings = get_settings()

engine_args = {}
if settings.database_url.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}

engine = create_engine(settings.database_url, echo=settings.sql_echo, future=True, **engine_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

DEFAULT_DEVICE_TYPES = (
    ("sensor", "Passive measurement device"),
    ("actuator", "Device that drives a physical output"),
    ("camera", "Video or still image capture device"),
    ("controller", "Programmable logic or field controller"),
)


def get_db_session() -> Generator[Session, None, None]:
    """Yield a request-scoped database session."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def seed_device_types(session: Session) -> None:
    """Insert the default device-type catalog into an empty table."""

    from .models import DeviceType

    if session.scalar(select(func.count()).select_from(DeviceType)):
        return
    session.add_all(DeviceType(name=name, description=description) for name, description in DEFAULT_DEVICE_TYPES)
    session.commit()


def init_db(bind: Engine | None = None, seed: bool | None = None) -> None:
    """Initialize service-owned tables."""

    from . import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    if settings.seed_device_types if seed is None else seed:
        with Session(bind) as session:
            seed_device_types(session)
