import sqlite3
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    create_engine,
    event,
    Column,
    String,
    Float,
    Date,
    DateTime,
    ForeignKey,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import get_settings

DATABASE_URL = get_settings().database_url

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless this is set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "custom_users"
    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(
        String(36), ForeignKey("custom_users.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(
        String(36), ForeignKey("custom_users.id", ondelete="CASCADE"), nullable=False
    )
    app_name = Column(String, nullable=True)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class Category(Base):
    __tablename__ = "categories"
    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    user_id = Column(
        String(36),
        ForeignKey("custom_users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name = Column(String, nullable=False)
    color = Column(String(7), nullable=False)


class Expense(Base):
    __tablename__ = "expenses"
    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    user_id = Column(
        String(36),
        ForeignKey("custom_users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    date = Column(Date, index=True, nullable=False)
    amount = Column(Float, nullable=False)
    merchant = Column(String, nullable=True)
    item = Column(String, nullable=True)
    note = Column(String, nullable=True)
    category_id = Column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
