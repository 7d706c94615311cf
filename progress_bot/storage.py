"""Хранилище сущностей: пользователи, записи трекинга, фото.

Единственная точка доступа к БД. Экземпляр создаётся один раз при старте
и передаётся обработчикам через application.bot_data["storage"].

Контракт:
    - get/update/delete несуществующего id -> None / False, без исключений;
    - update — слияние: ключи из словаря перезаписываются (в т.ч. None),
      отсутствующие ключи не меняются;
    - id автоинкрементные и не переиспользуются;
    - все изменения выполняются под одной блокировкой (single-writer).
"""
import logging
import threading
from datetime import date
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from werkzeug.security import generate_password_hash, check_password_hash
from progress_bot.database import get_db
from progress_bot.dates import parse_date
from progress_bot.models import User, TrackingEntry, Photo

logger = logging.getLogger(__name__)

# Поля, которые нельзя менять через create/update
PROTECTED_FIELDS = {"id", "created_at", "updated_at"}

DEMO_USER = {
    "username": "demo",
    "password": "password",
    "name": "John Doe",
    "age": 32,
    "current_level": 4,
    "starting_level": 0,
    "target_level": 8,
    "start_date": date(2023, 1, 15),
    "circumference": "5.2",
    "length": "6.0",
    "method": "T-Tape",
    "tension": 500,
}


def _writable_fields(model) -> set[str]:
    return set(model.__table__.columns.keys()) - PROTECTED_FIELDS


def _check_fields(model, fields: dict) -> None:
    unknown = set(fields) - _writable_fields(model)
    if unknown:
        raise ValueError(f"{model.__name__}: неизвестные поля {sorted(unknown)}")


def _merge(obj, fields: dict) -> None:
    """Слияние частичного обновления в объект."""
    for key, value in fields.items():
        setattr(obj, key, value)


class Storage:
    """CRUD-хранилище поверх SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._lock = threading.RLock()

    # ---------- Пользователи ----------

    def get_user(self, user_id: int) -> Optional[User]:
        with get_db(self._session_factory) as db:
            return db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with get_db(self._session_factory) as db:
            return db.query(User).filter(User.username == username).first()

    def get_user_by_telegram_id(self, telegram_id: int) -> Optional[User]:
        with get_db(self._session_factory) as db:
            return db.query(User).filter(User.telegram_id == telegram_id).first()

    def list_users(self) -> list[User]:
        """Пользователи в порядке создания."""
        with get_db(self._session_factory) as db:
            return db.query(User).order_by(User.id).all()

    def create_user(self, fields: dict) -> User:
        """Создать пользователя.

        Raises:
            ValueError: неизвестные поля, некорректные значения, пустой или занятый username
        """
        fields = dict(fields)
        _check_fields(User, fields)
        if not fields.get("username"):
            raise ValueError("User: username обязателен")
        if fields.get("password") is not None:
            fields["password"] = generate_password_hash(fields["password"])

        with self._lock, get_db(self._session_factory) as db:
            username = fields.get("username")
            if username and db.query(User).filter(User.username == username).first():
                raise ValueError(f"Пользователь {username!r} уже существует")

            user = User(**fields)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user {user.id} ({user.username})")
            return user

    def update_user(self, user_id: int, partial: dict) -> Optional[User]:
        partial = dict(partial)
        _check_fields(User, partial)
        if partial.get("password") is not None:
            partial["password"] = generate_password_hash(partial["password"])

        with self._lock, get_db(self._session_factory) as db:
            user = db.get(User, user_id)
            if not user:
                return None

            username = partial.get("username")
            if username and username != user.username:
                if db.query(User).filter(User.username == username).first():
                    raise ValueError(f"Пользователь {username!r} уже существует")

            _merge(user, partial)
            db.commit()
            db.refresh(user)
            logger.info(f"Updated user {user_id}: {sorted(partial)}")
            return user

    def delete_user(self, user_id: int) -> bool:
        """Удалить пользователя вместе с его записями и фото."""
        with self._lock, get_db(self._session_factory) as db:
            user = db.get(User, user_id)
            if not user:
                return False
            db.delete(user)
            db.commit()
            logger.info(f"Deleted user {user_id} with entries and photos")
            return True

    @staticmethod
    def check_password(user: User, password: str) -> bool:
        if not user.password:
            return False
        return check_password_hash(user.password, password)

    def seed_demo_user(self) -> User:
        """Создать демо-пользователя, если его ещё нет."""
        existing = self.get_user_by_username(DEMO_USER["username"])
        if existing:
            return existing
        return self.create_user(DEMO_USER)

    # ---------- Записи трекинга ----------

    def get_tracking_entry(self, entry_id: int) -> Optional[TrackingEntry]:
        with get_db(self._session_factory) as db:
            return db.get(TrackingEntry, entry_id)

    def list_tracking_entries(self, user_id: int) -> list[TrackingEntry]:
        """Записи пользователя, новые сверху."""
        with get_db(self._session_factory) as db:
            return (
                db.query(TrackingEntry)
                .filter(TrackingEntry.user_id == user_id)
                .order_by(TrackingEntry.date.desc(), TrackingEntry.id.desc())
                .all()
            )

    def get_tracking_entry_by_date(self, user_id: int, entry_date) -> Optional[TrackingEntry]:
        entry_date = parse_date(entry_date)
        with get_db(self._session_factory) as db:
            return (
                db.query(TrackingEntry)
                .filter(TrackingEntry.user_id == user_id, TrackingEntry.date == entry_date)
                .first()
            )

    def create_tracking_entry(self, fields: dict) -> TrackingEntry:
        """Создать запись.

        Raises:
            ValueError: запись за эту дату уже есть (используйте upsert_tracking_entry)
        """
        fields = dict(fields)
        _check_fields(TrackingEntry, fields)
        if "user_id" not in fields or "date" not in fields:
            raise ValueError("TrackingEntry: user_id и date обязательны")
        fields["date"] = parse_date(fields["date"])

        with self._lock, get_db(self._session_factory) as db:
            if self._find_entry(db, fields["user_id"], fields["date"]):
                raise ValueError(f"Запись за {fields['date']} уже существует")

            entry = TrackingEntry(**fields)
            db.add(entry)
            db.commit()
            db.refresh(entry)
            logger.info(f"Created tracking entry {entry.id} for user {entry.user_id} on {entry.date}")
            return entry

    def update_tracking_entry(self, entry_id: int, partial: dict) -> Optional[TrackingEntry]:
        partial = dict(partial)
        _check_fields(TrackingEntry, partial)
        if "date" in partial:
            partial["date"] = parse_date(partial["date"])

        with self._lock, get_db(self._session_factory) as db:
            entry = db.get(TrackingEntry, entry_id)
            if not entry:
                return None

            new_user = partial.get("user_id", entry.user_id)
            new_date = partial.get("date", entry.date)
            duplicate = self._find_entry(db, new_user, new_date)
            if duplicate and duplicate.id != entry.id:
                raise ValueError(f"Запись за {new_date} уже существует")

            _merge(entry, partial)
            db.commit()
            db.refresh(entry)
            logger.info(f"Updated tracking entry {entry_id}: {sorted(partial)}")
            return entry

    def upsert_tracking_entry(self, user_id: int, entry_date, fields: dict) -> tuple[TrackingEntry, bool]:
        """Создать или обновить запись за дату одной атомарной операцией.

        Returns:
            (запись, True если создана)
        """
        entry_date = parse_date(entry_date)
        fields = {k: v for k, v in fields.items() if k not in ("user_id", "date")}
        _check_fields(TrackingEntry, fields)

        with self._lock, get_db(self._session_factory) as db:
            entry = self._find_entry(db, user_id, entry_date)
            created = entry is None
            if created:
                entry = TrackingEntry(user_id=user_id, date=entry_date, **fields)
                db.add(entry)
            else:
                _merge(entry, fields)

            try:
                db.commit()
            except IntegrityError:
                # Запись успели создать из другого процесса: обновляем её
                db.rollback()
                entry = self._find_entry(db, user_id, entry_date)
                if entry is None:
                    raise
                _merge(entry, fields)
                db.commit()
                created = False

            db.refresh(entry)
            action = "Created" if created else "Updated"
            logger.info(f"{action} tracking entry {entry.id} for user {user_id} on {entry_date}")
            return entry, created

    def delete_tracking_entry(self, entry_id: int) -> bool:
        with self._lock, get_db(self._session_factory) as db:
            entry = db.get(TrackingEntry, entry_id)
            if not entry:
                return False
            db.delete(entry)
            db.commit()
            logger.info(f"Deleted tracking entry {entry_id}")
            return True

    @staticmethod
    def _find_entry(db, user_id: int, entry_date: date) -> Optional[TrackingEntry]:
        return (
            db.query(TrackingEntry)
            .filter(TrackingEntry.user_id == user_id, TrackingEntry.date == entry_date)
            .first()
        )

    # ---------- Фото ----------

    def get_photo(self, photo_id: int) -> Optional[Photo]:
        with get_db(self._session_factory) as db:
            return db.get(Photo, photo_id)

    def list_photos(self, user_id: int, is_reference: bool = False) -> list[Photo]:
        """Фото пользователя (или его эталонные фото), новые сверху."""
        with get_db(self._session_factory) as db:
            return (
                db.query(Photo)
                .filter(Photo.user_id == user_id, Photo.is_reference == is_reference)
                .order_by(Photo.date.desc(), Photo.id.desc())
                .all()
            )

    def list_reference_photos(self) -> list[Photo]:
        """Все эталонные фото, по возрастанию уровня."""
        with get_db(self._session_factory) as db:
            return (
                db.query(Photo)
                .filter(Photo.is_reference.is_(True))
                .order_by(Photo.level, Photo.id)
                .all()
            )

    def create_photo(self, fields: dict) -> Photo:
        fields = dict(fields)
        _check_fields(Photo, fields)

        with self._lock, get_db(self._session_factory) as db:
            photo = Photo(**fields)
            db.add(photo)
            db.commit()
            db.refresh(photo)
            logger.info(f"Created photo {photo.id} for user {photo.user_id} (level={photo.level})")
            return photo

    def update_photo(self, photo_id: int, partial: dict) -> Optional[Photo]:
        partial = dict(partial)
        _check_fields(Photo, partial)

        with self._lock, get_db(self._session_factory) as db:
            photo = db.get(Photo, photo_id)
            if not photo:
                return None
            _merge(photo, partial)
            db.commit()
            db.refresh(photo)
            return photo

    def delete_photo(self, photo_id: int) -> bool:
        with self._lock, get_db(self._session_factory) as db:
            photo = db.get(Photo, photo_id)
            if not photo:
                return False
            db.delete(photo)
            db.commit()
            logger.info(f"Deleted photo {photo_id}")
            return True
