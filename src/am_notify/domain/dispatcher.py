"""NotificationDispatcher Protocol.

``publish`` must return without waiting on the transport and must never
raise because of delivery problems: a lost notification is acceptable, a
rolled-back order is not.
"""

from typing import Protocol

from src.am_notify.domain.events import OrderEvent


class NotificationDispatcherProtocol(Protocol):
    def publish(self, event: OrderEvent) -> None: ...
