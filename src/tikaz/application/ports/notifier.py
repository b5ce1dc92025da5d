from __future__ import annotations

from typing import Protocol

from tikaz.domain.contact.entities import ContactMessage
from tikaz.domain.order.entities import Order, OrderStatus


class OrderNotifier(Protocol):
    def notify_order_placed(self, order: Order) -> None: ...

    def notify_status_changed(self, order: Order, new_status: OrderStatus) -> None: ...


class ContactNotifier(Protocol):
    def notify_contact_received(self, contact: ContactMessage) -> None: ...

    def notify_admin_new_contact(self, contact: ContactMessage) -> None: ...

    def notify_contact_response(self, contact: ContactMessage) -> None: ...
