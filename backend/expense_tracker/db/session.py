# expense_tracker/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from expense_tracker.core.config import settings

DATABASE_URL = settings.DATABASE_URL

# SQLite needs check_same_thread=False because FastAPI runs sync endpoints in a threadpool
connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# create engine and session factory
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy Session.
    Usage:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
