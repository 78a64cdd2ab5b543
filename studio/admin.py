from django.contrib import admin

from studio.models import Customer, Order, OrderClass, Participant, SyncState, YogaClass


class OrderClassInline(admin.TabularInline):
    model = OrderClass
    extra = 0


class ParticipantInline(admin.TabularInline):
    model = Participant
    extra = 1


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["login", "first_name", "surname", "is_member"]
    search_fields = ["login", "first_name", "surname", "email"]
    list_filter = ["is_member"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "customer", "product_id", "num_total", "status_class_pass"]
    list_filter = ["status_class_pass", "product_id"]
    search_fields = ["id", "customer__login"]
    readonly_fields = ["version"]
    inlines = [OrderClassInline]


@admin.register(YogaClass)
class YogaClassAdmin(admin.ModelAdmin):
    list_display = ["id", "notes"]
    search_fields = ["id"]
    inlines = [ParticipantInline]


@admin.register(SyncState)
class SyncStateAdmin(admin.ModelAdmin):
    list_display = ["key", "last_updated"]
