import decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('vehicle_number', models.CharField(max_length=30)),
                ('vehicle_type', models.CharField(blank=True, max_length=50)),
                ('driver_name', models.CharField(max_length=120)),
                ('driver_phone', models.CharField(max_length=20)),
                ('purpose', models.CharField(choices=[('delivery', 'Delivery'), ('pickup', 'Pickup'), ('maintenance', 'Maintenance'), ('other', 'Other')], max_length=20)),
                ('reason', models.CharField(max_length=255)),
                ('status', models.CharField(choices=[('in', 'In'), ('out', 'Out'), ('maintenance', 'Maintenance')], default='in', max_length=20)),
                ('time_in', models.DateTimeField(default=django.utils.timezone.now)),
                ('time_out', models.DateTimeField(blank=True, null=True)),
                ('last_maintenance_date', models.DateField(blank=True, null=True)),
                ('next_maintenance_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-time_in', '-id'],
                'indexes': [models.Index(fields=['company', 'status'], name='gate_vehicl_company_c6adf7_idx')],
                'unique_together': {('company', 'vehicle_number')},
            },
        ),
        migrations.CreateModel(
            name='VehicleMaintenance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('maintenance_type', models.CharField(max_length=100)),
                ('maintenance_date', models.DateField(default=django.utils.timezone.localdate)),
                ('description', models.TextField(blank=True)),
                ('cost', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=15)),
                ('performed_by', models.CharField(blank=True, max_length=120)),
                ('next_due_date', models.DateField(blank=True, null=True)),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='maintenance_records', to='gate.vehicle')),
            ],
            options={
                'ordering': ['-maintenance_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='GatePass',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gate_pass_number', models.CharField(blank=True, max_length=32)),
                ('vehicle_number', models.CharField(max_length=30)),
                ('driver_name', models.CharField(max_length=120)),
                ('driver_phone', models.CharField(max_length=20)),
                ('driver_id_number', models.CharField(blank=True, max_length=50)),
                ('driver_license_number', models.CharField(blank=True, max_length=50)),
                ('purpose', models.CharField(choices=[('delivery', 'Delivery'), ('pickup', 'Pickup'), ('maintenance', 'Maintenance'), ('other', 'Other')], max_length=20)),
                ('reason', models.CharField(max_length=255)),
                ('person_to_meet', models.CharField(blank=True, max_length=120)),
                ('department', models.CharField(blank=True, max_length=120)),
                ('security_notes', models.TextField(blank=True)),
                ('items', models.JSONField(blank=True, default=list)),
                ('images', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('time_in', models.DateTimeField(default=django.utils.timezone.now)),
                ('time_out', models.DateTimeField(blank=True, null=True)),
                ('printed_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('printed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='gate_passes', to='gate.vehicle')),
            ],
            options={
                'ordering': ['-time_in', '-id'],
                'indexes': [
                    models.Index(fields=['company', 'vehicle_number', 'status'], name='gate_gatepa_company_dd3cce_idx'),
                    models.Index(fields=['company', 'time_in'], name='gate_gatepa_company_9484f5_idx'),
                ],
                'unique_together': {('company', 'gate_pass_number')},
            },
        ),
    ]
