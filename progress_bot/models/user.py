"""Модель пользователя и его профиля восстановления."""
from datetime import date
from sqlalchemy import Column, BigInteger, Integer, String, Date
from sqlalchemy.orm import relationship, validates
from progress_bot.dates import parse_date
from progress_bot.models.base import BaseModel, check_level, check_range, check_required_text


class User(BaseModel):
    """Пользователь бота."""

    __tablename__ = "users"

    telegram_id = Column(BigInteger, unique=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    # Хеш пароля (werkzeug), у пользователей Telegram пустой
    password = Column(String(200))
    name = Column(String(100))
    age = Column(Integer)

    # Уровни прогресса (0-10)
    current_level = Column(Integer, default=0)
    starting_level = Column(Integer, default=0)
    target_level = Column(Integer, default=8)
    start_date = Column(Date, default=date.today)

    # Замеры: произвольные десятичные строки ("5.2")
    circumference = Column(String(20))
    length = Column(String(20))

    method = Column(String(100))
    tension = Column(Integer, default=500)  # граммы

    # Relationships
    tracking_entries = relationship(
        "TrackingEntry", back_populates="user", cascade="all, delete-orphan"
    )
    photos = relationship("Photo", back_populates="user", cascade="all, delete-orphan")

    @validates("username")
    def validate_username(self, key, value):
        return check_required_text(key, value)

    @validates("current_level", "starting_level", "target_level")
    def validate_level(self, key, value):
        return check_level(key, value, nullable=False)

    @validates("tension")
    def validate_tension(self, key, value):
        return check_range(key, value, low=0)

    @validates("age")
    def validate_age(self, key, value):
        return check_range(key, value, low=0, high=150)

    @validates("start_date")
    def validate_start_date(self, key, value):
        return parse_date(value) if value is not None else None

    def __repr__(self):
        return f"<User {self.username} level={self.current_level}>"
