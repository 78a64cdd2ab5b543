"""Ingestion service - turns point-of-sale sales into orders and users.

Sales arrive already parsed; fetching them from the point of sale is not
done here.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable

from django.utils import timezone

from studio.domain import Order, Sale, TicketCatalog
from studio.domain.errors import StoreError
from studio.domain.value_objects import DEFAULT_CATALOG
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


def academic_year(today: date, start_month: int = 8) -> str:
    """Return the academic year label, e.g. ``"24-25"``."""
    first = today.year if today.month >= start_month else today.year - 1
    return f"{first % 100:02d}-{(first + 1) % 100:02d}"


def split_sale(sale: Sale) -> list[Sale]:
    """Split a sale of several items into one sale per item.

    Order numbers of the copies get an ``n<i>`` suffix.
    """
    if sale.quantity <= 1:
        return [sale]
    return [
        replace(sale, order_number=f"{sale.order_number}n{i}", quantity=1)
        for i in range(1, sale.quantity + 1)
    ]


def _aware(moment: datetime) -> datetime:
    return timezone.make_aware(moment) if timezone.is_naive(moment) else moment


class IngestionService:
    """Service recording sales as orders."""

    def __init__(self, store: StudioStore, catalog: TicketCatalog | None = None) -> None:
        self._store = store
        self._catalog = catalog or DEFAULT_CATALOG

    def order_for_sale(self, sale: Sale) -> Order:
        """Build the order a single-item sale creates."""
        order = Order(
            id=sale.order_number,
            product_id=sale.product_id,
            product_line_id=sale.product_line_id,
            num_total=self._catalog.capacity_for(sale.product_type),
        )
        return order.with_recalculated_status(self._catalog)

    def record_sale(self, sale: Sale) -> list[str]:
        """Record a sale, returning the ids of the orders it created.

        Orders that already exist are left untouched.
        """
        created = []
        try:
            with self._store.atomic():
                for item in split_sale(sale):
                    if self._record_item(item):
                        created.append(item.order_number)
        except StoreError as exc:
            logger.error("Sale %s not recorded: %s", sale.order_number, exc)
            raise
        return created

    def _record_item(self, sale: Sale) -> bool:
        is_new = self._store.get_order(sale.order_number) is None
        if is_new:
            self._store.create_order(self.order_for_sale(sale))
            logger.info("Created order %s for product %s", sale.order_number, sale.product_id)
        self._attach_to_customer(sale)
        return is_new

    def _attach_to_customer(self, sale: Sale) -> None:
        customer = sale.customer
        if not customer.login:
            logger.warning("Order %s has no customer login", sale.order_number)
            return

        is_member = self._catalog.is_membership(sale.product_type)
        if self._store.get_user(customer.login) is None:
            self._store.create_user(
                customer.login,
                first_name=customer.first_name,
                surname=customer.surname,
                is_member=is_member,
                cid=customer.cid,
                email=customer.email,
            )
        elif is_member:
            self._store.set_member(customer.login, True)
        self._store.attach_order(customer.login, sale.order_number)

    def sync_sales(self, sales: Iterable[Sale], now: datetime | None = None) -> list[str]:
        """Record the sales made since the last sync and move the sync time.

        With no previous sync every sale is recorded.
        """
        last_updated = self._store.get_last_updated()
        created = []
        for sale in sales:
            if last_updated is not None and _aware(sale.sold_at) <= _aware(last_updated):
                continue
            created.extend(self.record_sale(sale))

        self._store.set_last_updated(now or timezone.now())
        logger.info("Synced sales: %d new orders", len(created))
        return created

    def last_updated(self) -> datetime | None:
        return self._store.get_last_updated()
