"""SQLite database setup via SQLModel."""

from sqlmodel import Session, SQLModel, create_engine

from config import DATABASE_URL

# FastAPI may open the session and run the endpoint on different threads
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=_connect_args)


def create_db():
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
