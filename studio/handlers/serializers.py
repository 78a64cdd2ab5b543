"""Serializers for transforming domain models to API responses and back."""

from rest_framework import serializers

from studio.domain import Customer, ProductType, RosterRow, Sale


class ProductTypeSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=0)
    product_line_id = serializers.IntegerField(min_value=0)


class ConsumptionEntrySerializer(serializers.Serializer):
    class_id = serializers.CharField(source="class_ref.value")
    ticked = serializers.BooleanField()


class OrderSerializer(serializers.Serializer):
    """Serializer for Order domain model."""

    id = serializers.CharField()
    product_id = serializers.IntegerField()
    product_line_id = serializers.IntegerField()
    num_total = serializers.IntegerField()
    classes = ConsumptionEntrySerializer(many=True)
    status_class_pass = serializers.CharField(source="status_class_pass.value")
    number_missing_ticks = serializers.SerializerMethodField()

    def get_number_missing_ticks(self, order) -> int:
        return order.number_missing_ticks()


class UserSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    first_name = serializers.CharField()
    surname = serializers.CharField()
    is_member = serializers.BooleanField()
    total_missing_ticks = serializers.SerializerMethodField()

    def get_total_missing_ticks(self, user) -> int:
        return user.total_missing_ticks()


class UserSerializer(UserSummarySerializer):
    """Serializer for User domain model, with orders."""

    orders = OrderSerializer(many=True)


class ParticipantSerializer(serializers.Serializer):
    id = serializers.CharField()
    user = UserSummarySerializer()
    attended = serializers.BooleanField()
    missing_class_pass = serializers.BooleanField()


class ClassSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    time = serializers.DateTimeField()


class YogaClassSerializer(ClassSummarySerializer):
    """Serializer for YogaClass domain model, with its roster."""

    notes = serializers.CharField(allow_blank=True)
    valid_tickets = ProductTypeSerializer(many=True)
    participants = ParticipantSerializer(many=True)


class AttendanceResultSerializer(serializers.Serializer):
    participant = ParticipantSerializer(allow_null=True)
    user = UserSerializer()
    touched_orders = OrderSerializer(many=True)


# Input


class AttendanceInputSerializer(serializers.Serializer):
    attended = serializers.BooleanField()


class PassInputSerializer(serializers.Serializer):
    missing_class_pass = serializers.BooleanField()


class NotesInputSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ParticipantInputSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=150)


class RosterRowSerializer(serializers.Serializer):
    login = serializers.CharField(max_length=150)
    first_name = serializers.CharField(allow_blank=True, required=False, default="")
    surname = serializers.CharField(allow_blank=True, required=False, default="")
    cid = serializers.CharField(allow_blank=True, required=False, default="")
    email = serializers.CharField(allow_blank=True, required=False, default="")


class ClassCreateSerializer(serializers.Serializer):
    time = serializers.RegexField(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$")
    valid_tickets = ProductTypeSerializer(many=True, required=False)
    notes = serializers.CharField(allow_blank=True, required=False, default="")
    roster = RosterRowSerializer(many=True, required=False)

    def to_command(self) -> dict:
        data = self.validated_data
        return {
            "class_time": data["time"],
            "valid_tickets": [ProductType(**t) for t in data.get("valid_tickets", [])],
            "notes": data["notes"],
            "roster": [RosterRow(**r) for r in data.get("roster", [])],
        }


class CustomerSerializer(serializers.Serializer):
    login = serializers.CharField(allow_blank=True)
    first_name = serializers.CharField(allow_blank=True, required=False, default="")
    surname = serializers.CharField(allow_blank=True, required=False, default="")
    cid = serializers.CharField(allow_blank=True, required=False, default="")
    email = serializers.CharField(allow_blank=True, required=False, default="")


class SaleSerializer(serializers.Serializer):
    order_number = serializers.CharField(max_length=60)
    sold_at = serializers.DateTimeField()
    product_id = serializers.IntegerField(min_value=0)
    product_line_id = serializers.IntegerField(min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.FloatField(required=False, default=0.0)
    customer = CustomerSerializer()

    def create(self, validated_data) -> Sale:
        customer = Customer(**validated_data.pop("customer"))
        return Sale(customer=customer, **validated_data)


class SyncStatusSerializer(serializers.Serializer):
    last_updated = serializers.DateTimeField(allow_null=True)
    academic_year = serializers.CharField()
