# Generated manually for the studio app

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("studio", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="order",
            name="attached_seq",
            field=models.PositiveIntegerField(blank=True, editable=False, null=True),
        ),
        migrations.AlterModelOptions(
            name="order",
            options={"ordering": ["attached_seq", "created_at"]},
        ),
    ]
