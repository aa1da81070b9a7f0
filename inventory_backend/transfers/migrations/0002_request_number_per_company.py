from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("transfers", "0001_initial"),
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="stockrequest",
            name="request_number",
            field=models.CharField(max_length=32),
        ),
        migrations.AddConstraint(
            model_name="stockrequest",
            constraint=models.UniqueConstraint(
                fields=("company", "request_number"), name="uniq_stockreq_number_per_company"
            ),
        ),
    ]
