# barbershop/db.py

from sqlmodel import SQLModel, create_engine, Session

from .config import get_settings

settings = get_settings()

# SQLite needs check_same_thread off because FastAPI runs sync handlers in a threadpool
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=_connect_args,
)


def init_db(bind=None):
    from . import models  # noqa: F401  (registers the tables)

    SQLModel.metadata.create_all(bind or engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
