# barberbook/db.py

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from barberbook.config import DATABASE_URL, DB_BUSY_TIMEOUT, DB_ECHO


def make_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)  # required for SQLite + FastAPI
        connect_args.setdefault("timeout", DB_BUSY_TIMEOUT)
    return create_engine(url, echo=DB_ECHO, connect_args=connect_args, **kwargs)


# Engine = connection to the database
engine = make_engine()


def create_db_and_tables(bind: Engine = engine):
    import barberbook.models  # noqa: F401  (registers the tables)

    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
