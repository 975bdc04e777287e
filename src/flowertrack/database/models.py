"""SQLAlchemy models for the flowertrack database."""

from datetime import datetime, UTC
from sqlalchemy import Column, DateTime, JSON, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()

MAIN_RECORD_ID = "main_data"


class AppData(Base):
    """Snapshot document stored under a fixed record id."""

    __tablename__ = "app_data"

    id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
