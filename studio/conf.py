"""Studio settings with their defaults.

Product identifiers come from the point-of-sale catalog and can be overridden
in the Django settings as ``(product_id, product_line_id)`` pairs.
"""

from django.conf import settings

from studio.domain import DEFAULT_CATALOG, ProductType, TicketCatalog


def _product(name: str, default: ProductType) -> ProductType:
    value = getattr(settings, name, None)
    if value is None:
        return default
    return ProductType.from_pair(value)


def get_ticket_catalog() -> TicketCatalog:
    return TicketCatalog(
        ten_class_pass=_product("STUDIO_TEN_CLASS_PASS", DEFAULT_CATALOG.ten_class_pass),
        single_class_member=_product(
            "STUDIO_SINGLE_CLASS_MEMBER", DEFAULT_CATALOG.single_class_member
        ),
        single_class_non_member=_product(
            "STUDIO_SINGLE_CLASS_NON_MEMBER", DEFAULT_CATALOG.single_class_non_member
        ),
        membership=_product("STUDIO_MEMBERSHIP", DEFAULT_CATALOG.membership),
        ten_class_pass_size=getattr(
            settings, "STUDIO_TEN_CLASS_PASS_SIZE", DEFAULT_CATALOG.ten_class_pass_size
        ),
    )


def get_new_academic_year_month() -> int:
    """Month (1-12) in which the studio's academic year starts."""
    return getattr(settings, "STUDIO_NEW_ACADEMIC_YEAR_MONTH", 8)
