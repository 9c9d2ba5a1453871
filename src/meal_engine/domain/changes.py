"""Unit of work committed atomically by a repository."""

from dataclasses import dataclass, field

from meal_engine.domain.ledger import LedgerEntry
from meal_engine.domain.orders import FreezeRecord, Order
from meal_engine.domain.subscriptions import Subscription


@dataclass
class ChangeSet:
    """Entity writes that must become visible together or not at all.

    Saved and deleted subscriptions and orders carry the version they were read
    at (0 for entities that were never stored). Storage accepts a write only
    while the stored version still matches and persists it incremented by one.
    """

    subscriptions: list[Subscription] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    deleted_orders: list[Order] = field(default_factory=list)
    freeze_records: list[FreezeRecord] = field(default_factory=list)
    ledger_entries: list[LedgerEntry] = field(default_factory=list)

    def save_subscription(self, subscription: Subscription) -> None:
        self.subscriptions = [
            item for item in self.subscriptions if item.id != subscription.id
        ]
        self.subscriptions.append(subscription)

    def save_order(self, order: Order) -> None:
        self.orders = [item for item in self.orders if item.id != order.id]
        self.orders.append(order)

    def delete_order(self, order: Order) -> None:
        self.orders = [item for item in self.orders if item.id != order.id]
        if order.version > 0:
            self.deleted_orders.append(order)

    def is_empty(self) -> bool:
        return not (
            self.subscriptions
            or self.orders
            or self.deleted_orders
            or self.freeze_records
            or self.ledger_entries
        )
