from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.session import SessionLocal
from app.services.scheduling import ValidationGateway


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor_id(x_actor_id: str | None = Header(default=None, max_length=36)) -> str | None:
    return x_actor_id


def get_gateway(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ValidationGateway:
    return ValidationGateway(db, settings=settings)
