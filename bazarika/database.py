from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
from bazarika.config import settings


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # a single shared connection keeps an in-memory database alive
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


engine = _build_engine(settings.database_url)


def create_db_and_tables():
    import bazarika.models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
