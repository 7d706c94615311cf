"""Модель фото прогресса."""
from sqlalchemy import Column, Integer, String, Date, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship, validates
from progress_bot.dates import parse_date
from progress_bot.models.base import BaseModel, check_level


class Photo(BaseModel):
    """Фото прогресса или эталонное фото уровня.

    В таблице хранится только имя файла, сам файл лежит в UPLOADS_DIR.
    """

    __tablename__ = "photos"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    filename = Column(String(200), nullable=False)

    # Уровень, подтверждённый пользователем
    level = Column(Integer)
    # Уровень, предложенный сопоставлением сигнатур
    suggested_level = Column(Integer)

    day = Column(Integer)
    notes = Column(Text)

    # True = эталонное фото уровня, а не загрузка пользователя
    is_reference = Column(Boolean, default=False, nullable=False)

    # Relationship
    user = relationship("User", back_populates="photos")

    @validates("date")
    def validate_date(self, key, value):
        return parse_date(value)

    @validates("level", "suggested_level")
    def validate_level(self, key, value):
        return check_level(key, value)

    def __repr__(self):
        return f"<Photo {self.filename} level={self.level} reference={self.is_reference}>"
