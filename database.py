from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import Config

# --- CONFIGURATION ---
DATABASE_URL = Config.DATABASE_URL

# Fix for Render/Heroku: SQLAlchemy requires postgresql://, but the platform might provide postgres://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

IS_POSTGRES = DATABASE_URL.startswith("postgresql")

# --- ENGINE & SESSION ---
if IS_POSTGRES:
    # Production: PostgreSQL with connection pooling and a per-statement deadline
    connect_args = {}
    if Config.DB_STATEMENT_TIMEOUT_MS > 0:
        connect_args["options"] = f"-c statement_timeout={Config.DB_STATEMENT_TIMEOUT_MS}"
    engine = create_engine(
        DATABASE_URL,
        pool_size=20,
        max_overflow=10,
        pool_timeout=Config.DB_POOL_TIMEOUT,
        pool_recycle=1800,
        connect_args=connect_args
    )
else:
    # Development: SQLite (no connection pooling)
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create all tables. Imports the ORM module so every model is registered."""
    import models_orm  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


# --- DEPENDENCY ---
def get_db():
    """
    Dependency for FastAPI Routes.
    Yields a database session and closes it after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- UTILS ---
def get_db_session():
    return SessionLocal()
