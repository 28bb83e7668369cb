from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from siamleave.core.config import settings

# Support both PostgreSQL/MySQL and SQLite via centralized settings
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("sqlite"):
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from siamleave.models import (  # noqa: F401
        user, position, leave_type, leave_quota, leave_used,
        leave_request, notification
    )
    Base.metadata.create_all(bind=engine)
