import os
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from vitraya.db.models import Base

# Override with DB_PATH when needed.
DB_PATH = os.getenv("DB_PATH", "/var/data/vitraya.db")

connect_args = {"check_same_thread": False}


def _build_engine(db_path: str):
    db_parent = Path(db_path).expanduser().resolve().parent
    db_parent.mkdir(parents=True, exist_ok=True)
    database_url = f"sqlite:///{db_path}"
    return create_engine(database_url, connect_args=connect_args)


engine = _build_engine(DB_PATH)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure_database(db_path: str) -> None:
    global DB_PATH, engine
    DB_PATH = db_path
    engine = _build_engine(DB_PATH)
    SessionLocal.configure(bind=engine)


def create_tables() -> None:
    Base.metadata.create_all(bind=engine)
    # Columns added after the first release; SQLite has no migrations here.
    with engine.begin() as conn:
        quiz_columns = {row[1] for row in conn.execute(text("PRAGMA table_info(quiz_results)")).fetchall()}
        if "analysis_source" not in quiz_columns:
            conn.execute(text("ALTER TABLE quiz_results ADD COLUMN analysis_source VARCHAR(32)"))
            conn.execute(text("UPDATE quiz_results SET analysis_source = 'model' WHERE ai_analyzed = 1"))

        user_columns = {row[1] for row in conn.execute(text("PRAGMA table_info(users)")).fetchall()}
        if "last_login_at" not in user_columns:
            conn.execute(text("ALTER TABLE users ADD COLUMN last_login_at DATETIME"))


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
