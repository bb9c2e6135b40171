"""Shared API dependencies."""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.subscription_store import SubscriptionStore


def get_subscription_store(db: Session = Depends(get_db)) -> SubscriptionStore:
    return SubscriptionStore(db)


__all__ = ["get_db", "get_subscription_store"]
