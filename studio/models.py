"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models

from studio.domain import StatusClassPass


class Customer(models.Model):
    """Persistence model for studio users, keyed by their point-of-sale login."""

    login = models.CharField(primary_key=True, max_length=150)
    cid = models.CharField(max_length=64, blank=True, default="")
    first_name = models.CharField(max_length=150)
    surname = models.CharField(max_length=150)
    email = models.EmailField(blank=True, default="")
    is_member = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["surname", "first_name"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.surname} ({self.login})"


class Order(models.Model):
    """Persistence model for purchased tickets and passes."""

    STATUS_CHOICES = [
        (StatusClassPass.NOT_APPLICABLE.value, "Not applicable"),
        (StatusClassPass.IN_USE.value, "In use"),
        (StatusClassPass.ALL_TICKED.value, "All ticked"),
        (StatusClassPass.MISSING_TICKS.value, "Missing ticks"),
    ]

    id = models.CharField(primary_key=True, max_length=64)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name="orders",
        null=True,
        blank=True,
    )
    product_id = models.PositiveIntegerField()
    product_line_id = models.PositiveIntegerField()
    num_total = models.PositiveIntegerField()
    status_class_pass = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=StatusClassPass.NOT_APPLICABLE.value,
    )
    version = models.PositiveIntegerField(default=0)
    attached_seq = models.PositiveIntegerField(null=True, blank=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        # A user's orders keep the order they were attached in.
        ordering = ["attached_seq", "created_at"]
        indexes = [
            models.Index(fields=["customer"], name="studio_order_customer_idx"),
        ]

    def __str__(self) -> str:
        return self.id


class YogaClass(models.Model):
    """Persistence model for classes. The id encodes the start as YYYYMMDDHHmm."""

    id = models.CharField(primary_key=True, max_length=12)
    valid_tickets = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.id


class OrderClass(models.Model):
    """One class consumed by an order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="consumptions")
    yoga_class = models.ForeignKey(
        YogaClass, on_delete=models.PROTECT, related_name="consumptions"
    )
    ticked = models.BooleanField(default=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["order", "yoga_class"], name="unique_order_class"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} - {self.yoga_class_id}"


class Participant(models.Model):
    """A customer on the roster of a class."""

    yoga_class = models.ForeignKey(
        YogaClass, on_delete=models.CASCADE, related_name="participants"
    )
    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="participations"
    )
    attended = models.BooleanField(default=False)
    missing_class_pass = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["yoga_class", "customer"], name="unique_class_participant"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.yoga_class_id} - {self.customer_id}"


class SyncState(models.Model):
    """Bookkeeping for the point-of-sale import."""

    key = models.CharField(primary_key=True, max_length=50)
    last_updated = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return self.key
