"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import Self

CLASS_REF_LENGTH = 12
CLASS_INPUT_FORMAT = "%Y-%m-%d %H:%M"


@total_ordering
@dataclass(frozen=True)
class ClassRef:
    """Identifier of a class occurrence.

    The value is a fixed-width ``YYYYMMDDHHmm`` token encoding the start of the
    class. Ordering always goes through the decoded instant, never through the
    raw string.
    """

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != CLASS_REF_LENGTH or not self.value.isdigit():
            raise ValueError(f"Invalid class id: {self.value!r}")
        # Rejects impossible dates such as month 13.
        self.starts_at

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    @classmethod
    def from_datetime(cls, moment: datetime) -> Self:
        return cls(value=moment.strftime("%Y%m%d%H%M"))

    @classmethod
    def from_input(cls, value: str) -> Self:
        """Parse the ``YYYY-MM-DD HH:mm`` format coordinators type in."""
        return cls.from_datetime(datetime.strptime(value.strip(), CLASS_INPUT_FORMAT))

    @property
    def starts_at(self) -> datetime:
        v = self.value
        return datetime(
            int(v[0:4]),
            int(v[4:6]),
            int(v[6:8]),
            int(v[8:10]),
            int(v[10:12]),
        )

    @staticmethod
    def compare(c1: "ClassRef", c2: "ClassRef") -> int:
        """Return seconds between the two classes; positive when c1 is later."""
        return int((c1.starts_at - c2.starts_at).total_seconds())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ClassRef):
            return NotImplemented
        return ClassRef.compare(self, other) < 0

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProductType:
    """A purchasable product as identified by the point-of-sale catalog."""

    product_id: int
    product_line_id: int

    @classmethod
    def from_pair(cls, pair: tuple[int, int] | list[int]) -> Self:
        product_id, product_line_id = pair
        return cls(product_id=int(product_id), product_line_id=int(product_line_id))


class StatusClassPass(Enum):
    """Derived status of a multi-class pass."""

    NOT_APPLICABLE = "notApplicable"
    IN_USE = "inUse"
    ALL_TICKED = "allTicked"
    MISSING_TICKS = "missingTicks"

    @classmethod
    def from_string(cls, value: str) -> "StatusClassPass":
        """Decode a stored status. Unknown values are not applicable."""
        try:
            return cls(value)
        except ValueError:
            return cls.NOT_APPLICABLE


@dataclass(frozen=True)
class TicketCatalog:
    """Product types the studio treats specially."""

    ten_class_pass: ProductType
    single_class_member: ProductType
    single_class_non_member: ProductType
    membership: ProductType
    ten_class_pass_size: int = 10

    def __post_init__(self) -> None:
        if self.ten_class_pass_size <= 0:
            raise ValueError("Pass size must be positive")

    @property
    def default_tickets(self) -> tuple[ProductType, ...]:
        return (
            self.ten_class_pass,
            self.single_class_member,
            self.single_class_non_member,
        )

    def is_class_pass(self, product_type: ProductType) -> bool:
        return product_type == self.ten_class_pass

    def is_membership(self, product_type: ProductType) -> bool:
        return product_type == self.membership

    def capacity_for(self, product_type: ProductType) -> int:
        """Number of classes a freshly sold product can be used for.

        Sales are matched on product id only: older product lines of the pass
        and the membership are still sold.
        """
        if product_type.product_id == self.ten_class_pass.product_id:
            return self.ten_class_pass_size
        if product_type.product_id == self.membership.product_id:
            return 0
        return 1


DEFAULT_CATALOG = TicketCatalog(
    ten_class_pass=ProductType(47764, 79740),
    single_class_member=ProductType(47776, 79759),
    single_class_non_member=ProductType(47777, 79760),
    membership=ProductType(50311, 83799),
)
