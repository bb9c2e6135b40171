"""
Subscription Store
Create, read, update, delete, list and aggregate subscription records
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PersistenceError, ValidationError
from app.core.month_year import format_month_year, parse_month_year
from app.models import Subscription
from app.schemas.subscription import SubscriptionSchema, SubscriptionUpdate
from app.services.query_filter import Assignments, QueryFilter, SQLParams

logger = logging.getLogger(__name__)

# Upper bound of the 32-bit price column.
MAX_PRICE = 2**31 - 1


def _require_text(field: str, value: Optional[str]) -> str:
    if not value:
        raise ValidationError(f"{field} cannot be empty")
    return value


def _require_price(price: int) -> int:
    if price < 0:
        raise ValidationError("price must be non-negative")
    if price > MAX_PRICE:
        raise ValidationError(f"price must not exceed {MAX_PRICE}")
    return price


def serialize_subscription(record: Subscription) -> SubscriptionSchema:
    return SubscriptionSchema(
        id=record.id,
        service_name=record.service_name,
        price=record.price,
        user_id=record.user_id,
        start_date=format_month_year(record.start_date),
        end_date=format_month_year(record.end_date),
    )


class SubscriptionStore:
    """
    Persistence operations for subscriptions on top of a SQLAlchemy session.

    Every write is a single statement committed on success. Storage failures
    roll the session back and surface as PersistenceError.
    """

    def __init__(self, db: Session, log: Optional[logging.Logger] = None):
        self.db = db
        self.logger = log or logger
        self.table = Subscription.__table__

    @contextmanager
    def _persisting(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.exception("Failed to %s", action)
            raise PersistenceError(f"failed to {action}") from exc

    def create(
        self,
        service_name: str,
        price: int,
        user_id: str,
        start_date: str,
        end_date: Optional[str] = None,
    ) -> int:
        """
        Insert a subscription and return its new id.

        An empty or missing end_date stores an open-ended subscription.
        """
        _require_text("service_name", service_name)
        _require_text("user_id", user_id)
        _require_price(price)
        start = parse_month_year(start_date, "start_date")
        end = parse_month_year(end_date, "end_date") if end_date else None

        record = Subscription(
            service_name=service_name,
            price=price,
            user_id=user_id,
            start_date=start,
            end_date=end,
        )
        with self._persisting("insert subscription"):
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)

        self.logger.info("Created subscription %s for user %s", record.id, user_id)
        return record.id

    def get(self, subscription_id: int) -> SubscriptionSchema:
        with self._persisting("fetch subscription"):
            record = self.db.query(Subscription).filter(Subscription.id == subscription_id).first()
        if record is None:
            self.logger.warning("Subscription %s not found", subscription_id)
            raise NotFoundError(f"subscription with id {subscription_id} not found")
        return serialize_subscription(record)

    def list(self) -> List[SubscriptionSchema]:
        with self._persisting("list subscriptions"):
            records = self.db.query(Subscription).order_by(Subscription.id.asc()).all()
        return [serialize_subscription(r) for r in records]

    def update(self, subscription_id: int, changes: SubscriptionUpdate) -> None:
        """
        Apply the fields present in ``changes`` and nothing else.

        Validation runs before the write, so a rejected update changes nothing.
        A missing id is detected from the UPDATE affecting zero rows.
        """
        supplied = changes.supplied()
        assignments = Assignments(self.table)

        if "service_name" in supplied:
            assignments.set("service_name", _require_text("service_name", supplied["service_name"]))
        if "price" in supplied:
            assignments.set("price", _require_price(supplied["price"]))
        if "user_id" in supplied:
            assignments.set("user_id", _require_text("user_id", supplied["user_id"]))
        if "start_date" in supplied:
            if supplied["start_date"] == "":
                raise ValidationError("start_date cannot be empty")
            assignments.set("start_date", parse_month_year(supplied["start_date"], "start_date"))
        if "end_date" in supplied:
            end_date = supplied["end_date"]
            assignments.set("end_date", parse_month_year(end_date, "end_date") if end_date else None)

        if not assignments:
            raise ValidationError("no fields to update")

        params = SQLParams(self.table)
        set_clause = assignments.render(params)
        where_clause = QueryFilter(self.table).add("id", "=", subscription_id).render(params)
        statement = text(
            f"UPDATE {self.table.name} SET {set_clause} WHERE {where_clause}"
        ).bindparams(*params.binds)

        with self._persisting("update subscription"):
            result = self.db.execute(statement)
            if result.rowcount == 0:
                self.db.rollback()
            else:
                self.db.commit()

        if result.rowcount == 0:
            self.logger.warning("Subscription %s not found for update", subscription_id)
            raise NotFoundError(f"subscription with id {subscription_id} not found")
        self.logger.info(
            "Updated subscription %s (%s)", subscription_id, ", ".join(assignments.columns)
        )

    def delete(self, subscription_id: int) -> None:
        with self._persisting("delete subscription"):
            deleted = (
                self.db.query(Subscription)
                .filter(Subscription.id == subscription_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()

        if deleted == 0:
            self.logger.warning("Subscription %s not found for delete", subscription_id)
            raise NotFoundError(f"subscription with id {subscription_id} not found")
        self.logger.info("Deleted subscription %s", subscription_id)

    def total_cost(
        self,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> int:
        """
        Sum of prices over the subscriptions matching every supplied filter.

        start_date and end_date bound a period in MM-YYYY; a subscription
        counts when its active interval overlaps that period, and one without
        an end date is active indefinitely. None means the filter is not
        applied; an empty string is rejected.
        """
        query_filter = QueryFilter(self.table)

        if user_id is not None:
            query_filter.add("user_id", "=", user_id)
        if service_name is not None:
            query_filter.add("service_name", "=", service_name)

        period_start = self._period_bound("start_date", start_date)
        period_end = self._period_bound("end_date", end_date)

        if period_end is not None:
            query_filter.add("start_date", "<=", period_end)
        if period_start is not None:
            query_filter.add_any(
                query_filter.predicate("end_date", "IS NULL"),
                query_filter.predicate("end_date", ">=", period_start),
            )

        params = SQLParams(self.table)
        sql = f"SELECT COALESCE(SUM(price), 0) AS total FROM {self.table.name}"
        if query_filter:
            sql = f"{sql} WHERE {query_filter.render(params)}"

        with self._persisting("calculate total cost"):
            total = self.db.execute(text(sql).bindparams(*params.binds)).scalar()
        return int(total or 0)

    @staticmethod
    def _period_bound(field: str, value: Optional[str]) -> Optional[date]:
        if value is None:
            return None
        if value == "":
            raise ValidationError(f"{field} cannot be empty")
        return parse_month_year(value, field)
