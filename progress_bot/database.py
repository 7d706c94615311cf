"""Подключение к базе данных SQLAlchemy."""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Базовый класс для моделей
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Создание движка БД.

    Для SQLite в памяти используется StaticPool, иначе каждая сессия
    получала бы собственную пустую базу.
    """
    kwargs = {"echo": echo}  # True для отладки SQL
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Фабрика сессий.

    expire_on_commit=False: объекты остаются читаемыми после закрытия сессии.
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Создание всех таблиц в БД."""
    # Импорт регистрирует модели в Base.metadata
    import progress_bot.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db(session_factory: sessionmaker):
    """Контекстный менеджер для сессий БД.

    Использование:
        with get_db(session_factory) as db:
            user = db.query(User).first()
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
