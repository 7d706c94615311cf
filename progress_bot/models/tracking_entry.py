"""Модель ежедневной записи трекинга."""
from sqlalchemy import Column, Integer, Float, String, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from progress_bot.dates import parse_date
from progress_bot.models.base import BaseModel, check_level, check_range, check_required_text

# Метод-заглушка: день без нагрузки
REST_DAY = "Rest Day"


class TrackingEntry(BaseModel):
    """Запись за день: метод, часы, натяжение, комфорт."""

    __tablename__ = "tracking_entries"
    # Одна запись на пользователя за дату
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_tracking_entry_user_date"),
        {"sqlite_autoincrement": True},
    )

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    method_used = Column(String(100), nullable=False)
    hours_worn = Column(Float, nullable=False, default=0)
    tension_used = Column(Integer)  # граммы
    comfort_level = Column(Integer)  # 1-5
    notes = Column(Text)

    # День пути (1 = дата старта), считается при записи
    day = Column(Integer)
    # Уровень, замеченный в этот день (опционально)
    level = Column(Integer)

    # Relationship
    user = relationship("User", back_populates="tracking_entries")

    @validates("date")
    def validate_date(self, key, value):
        return parse_date(value)

    @validates("method_used")
    def validate_method(self, key, value):
        return check_required_text(key, value)

    @validates("hours_worn")
    def validate_hours(self, key, value):
        return check_range(key, value, low=0, high=24, nullable=False)

    @validates("tension_used")
    def validate_tension(self, key, value):
        return check_range(key, value, low=0)

    @validates("comfort_level")
    def validate_comfort(self, key, value):
        return check_range(key, value, low=1, high=5)

    @validates("level")
    def validate_level(self, key, value):
        return check_level(key, value)

    def __repr__(self):
        return f"<TrackingEntry user_id={self.user_id} date={self.date} {self.method_used}>"
