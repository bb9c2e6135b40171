"""Subscription table: one row per user subscription to a paid service."""
from sqlalchemy import Column, Date, Integer, Text

from app.models import Base


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_name = Column(Text, nullable=False, index=True)
    price = Column(Integer, nullable=False)
    user_id = Column(Text, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
