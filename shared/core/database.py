from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from shared.core.config import LEASE_DATABASE_URL, settings

Base = declarative_base()

if LEASE_DATABASE_URL.startswith("sqlite"):
    # single shared connection so an in-memory database survives across sessions
    lease_engine = create_engine(
        LEASE_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    lease_engine = create_engine(
        LEASE_DATABASE_URL,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.DB_POOL_SIZE,          # max idle connections
        max_overflow=settings.DB_MAX_OVERFLOW,    # max temporary extra connections
        pool_timeout=30       # wait time before failing
    )

LeaseSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=lease_engine)


# Dependency
def get_lease_db():
    db = LeaseSessionLocal()
    try:
        yield db
    finally:
        db.close()
