# Generated manually: prospects and activities link to prospecting candidates

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('crm', '0001_initial'),
        ('prospecting', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='prospect',
            name='candidate',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prospects', to='prospecting.candidate'),
        ),
        migrations.AddField(
            model_name='activitylog',
            name='candidate',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='prospecting.candidate'),
        ),
    ]
