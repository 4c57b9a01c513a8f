"""Notification event envelope.

One JSON document per committed order change, addressed to a single
recipient. The transport broadcasts every envelope; consumers filter by
``recipient_id``.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.am_common.enums import OrderEventType, UserRole


class OrderEvent(BaseModel):
    event_type: OrderEventType
    recipient_id: str
    recipient_role: UserRole
    order_id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def is_addressed_to(self, user_id: str) -> bool:
        return self.recipient_id == user_id
