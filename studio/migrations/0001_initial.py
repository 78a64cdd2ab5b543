# Generated manually for the studio app

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("login", models.CharField(max_length=150, primary_key=True, serialize=False)),
                ("cid", models.CharField(blank=True, default="", max_length=64)),
                ("first_name", models.CharField(max_length=150)),
                ("surname", models.CharField(max_length=150)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("is_member", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["surname", "first_name"],
            },
        ),
        migrations.CreateModel(
            name="YogaClass",
            fields=[
                ("id", models.CharField(max_length=12, primary_key=True, serialize=False)),
                ("valid_tickets", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="SyncState",
            fields=[
                ("key", models.CharField(max_length=50, primary_key=True, serialize=False)),
                ("last_updated", models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("product_id", models.PositiveIntegerField()),
                ("product_line_id", models.PositiveIntegerField()),
                ("num_total", models.PositiveIntegerField()),
                (
                    "status_class_pass",
                    models.CharField(
                        choices=[
                            ("notApplicable", "Not applicable"),
                            ("inUse", "In use"),
                            ("allTicked", "All ticked"),
                            ("missingTicks", "Missing ticks"),
                        ],
                        default="notApplicable",
                        max_length=20,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="orders",
                        to="studio.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [models.Index(fields=["customer"], name="studio_order_customer_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderClass",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("ticked", models.BooleanField(default=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="consumptions",
                        to="studio.order",
                    ),
                ),
                (
                    "yoga_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="consumptions",
                        to="studio.yogaclass",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "yoga_class"), name="unique_order_class"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("attended", models.BooleanField(default=False)),
                ("missing_class_pass", models.BooleanField(default=False)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="studio.customer",
                    ),
                ),
                (
                    "yoga_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="studio.yogaclass",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("yoga_class", "customer"), name="unique_class_participant"
                    )
                ],
            },
        ),
    ]
