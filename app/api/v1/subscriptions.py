"""
Subscriptions API Routes
Create, list, read, update, delete and total up subscriptions
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_subscription_store
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionCreated,
    SubscriptionSchema,
    SubscriptionUpdate,
    TotalCostSchema,
)
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SubscriptionCreated)
def create_subscription(
    payload: SubscriptionCreate,
    store: SubscriptionStore = Depends(get_subscription_store),
) -> SubscriptionCreated:
    """Create a new subscription"""
    subscription_id = store.create(
        service_name=payload.service_name,
        price=payload.price,
        user_id=payload.user_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    logger.info("Created subscription id=%s", subscription_id)
    return SubscriptionCreated(id=subscription_id)


@router.get("", response_model=List[SubscriptionSchema])
def list_subscriptions(
    store: SubscriptionStore = Depends(get_subscription_store),
) -> List[SubscriptionSchema]:
    """List all subscriptions ordered by id"""
    subscriptions = store.list()
    logger.info("Returned subscriptions list count=%s", len(subscriptions))
    return subscriptions


@router.get("/total", response_model=TotalCostSchema)
def get_total_cost(
    user_id: Optional[str] = None,
    service_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    store: SubscriptionStore = Depends(get_subscription_store),
) -> TotalCostSchema:
    """
    Total price of subscriptions matching the optional filters.

    start_date and end_date are MM-YYYY bounds of the period; subscriptions
    overlapping the period are counted.
    """
    total = store.total_cost(
        user_id=user_id or None,
        service_name=service_name or None,
        start_date=start_date,
        end_date=end_date,
    )
    logger.info("Returned total=%s", total)
    return TotalCostSchema(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionSchema)
def get_subscription(
    subscription_id: int,
    store: SubscriptionStore = Depends(get_subscription_store),
) -> SubscriptionSchema:
    return store.get(subscription_id)


@router.put("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
@router.patch("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_subscription(
    subscription_id: int,
    payload: SubscriptionUpdate,
    store: SubscriptionStore = Depends(get_subscription_store),
) -> Response:
    """Update subscription fields partially"""
    store.update(subscription_id, payload)
    logger.info("Updated subscription id=%s", subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: int,
    store: SubscriptionStore = Depends(get_subscription_store),
) -> Response:
    store.delete(subscription_id)
    logger.info("Deleted subscription id=%s", subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
