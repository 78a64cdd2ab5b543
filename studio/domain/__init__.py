from studio.domain.models import (
    ClassSummary,
    ConsumptionEntry,
    Customer,
    Order,
    Participant,
    RosterRow,
    Sale,
    User,
    YogaClass,
)
from studio.domain.value_objects import (
    DEFAULT_CATALOG,
    ClassRef,
    ProductType,
    StatusClassPass,
    TicketCatalog,
)

__all__ = [
    "ClassSummary",
    "ConsumptionEntry",
    "Customer",
    "Order",
    "Participant",
    "RosterRow",
    "Sale",
    "User",
    "YogaClass",
    "DEFAULT_CATALOG",
    "ClassRef",
    "ProductType",
    "StatusClassPass",
    "TicketCatalog",
]
