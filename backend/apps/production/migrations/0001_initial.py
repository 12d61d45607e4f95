import decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        ('sales', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ProductionOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order_number', models.CharField(blank=True, max_length=32)),
                ('product_name', models.CharField(max_length=255)),
                ('product_type', models.CharField(blank=True, max_length=100)),
                ('fabric_type', models.CharField(blank=True, max_length=100)),
                ('color', models.CharField(blank=True, max_length=100)),
                ('design', models.CharField(blank=True, max_length=255)),
                ('planned_quantity', models.DecimalField(decimal_places=3, max_digits=15)),
                ('completed_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('rejected_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('unit', models.CharField(default='meters', max_length=20)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('approved', 'Approved'), ('in_progress', 'In Progress'), ('on_hold', 'On Hold'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('planned_start_date', models.DateTimeField(blank=True, null=True)),
                ('planned_end_date', models.DateTimeField(blank=True, null=True)),
                ('actual_start_date', models.DateTimeField(blank=True, null=True)),
                ('actual_end_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('customer_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_orders', to='sales.customerorder')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['company', 'status'], name='production__company_a77760_idx')],
                'unique_together': {('company', 'order_number')},
            },
        ),
        migrations.CreateModel(
            name='ProductionStage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stage_number', models.PositiveSmallIntegerField()),
                ('stage_name', models.CharField(max_length=120)),
                ('process_type', models.CharField(choices=[('grey_fabric_inward', 'Grey Fabric Inward'), ('pre_processing', 'Pre-Processing'), ('dyeing', 'Dyeing'), ('printing', 'Printing'), ('washing', 'Washing'), ('fixing', 'Color Fixing'), ('finishing', 'Finishing'), ('quality_control', 'Quality Control'), ('cutting_packing', 'Cutting & Packing'), ('dispatch_invoice', 'Dispatch & Invoice')], max_length=30)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('on_hold', 'On Hold')], default='pending', max_length=20)),
                ('planned_duration_minutes', models.PositiveIntegerField(default=0)),
                ('actual_start_time', models.DateTimeField(blank=True, null=True)),
                ('actual_end_time', models.DateTimeField(blank=True, null=True)),
                ('actual_duration_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('produced_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('defect_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('quality_grade', models.CharField(blank=True, choices=[('A+', 'A+'), ('A', 'A'), ('B+', 'B+'), ('B', 'B'), ('C', 'C'), ('Reject', 'Reject')], max_length=8)),
                ('quality_notes', models.TextField(blank=True)),
                ('output_images', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('hold_reason', models.TextField(blank=True)),
                ('held_at', models.DateTimeField(blank=True, null=True)),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('production_order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stages', to='production.productionorder')),
                ('started_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['production_order', 'stage_number'],
                'unique_together': {('production_order', 'stage_number')},
            },
        ),
        migrations.CreateModel(
            name='Dyeing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch_number', models.CharField(blank=True, max_length=40)),
                ('stage_number', models.PositiveSmallIntegerField(default=0)),
                ('machine_id', models.CharField(blank=True, max_length=60)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('on_hold', 'On Hold'), ('rejected', 'Rejected'), ('rework', 'Rework')], default='pending', max_length=20)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('input_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('output_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('waste_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('efficiency', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=6)),
                ('process_parameters', models.JSONField(blank=True, default=dict)),
                ('quality_checks', models.JSONField(blank=True, default=list)),
                ('issues', models.JSONField(blank=True, default=list)),
                ('rework_details', models.JSONField(blank=True, default=dict)),
                ('cost_breakdown', models.JSONField(blank=True, default=dict)),
                ('total_cost', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('process_images', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('dyeing_type', models.CharField(choices=[('reactive', 'Reactive'), ('disperse', 'Disperse'), ('acid', 'Acid'), ('basic', 'Basic'), ('direct', 'Direct'), ('vat', 'Vat'), ('sulfur', 'Sulfur')], max_length=20)),
                ('dyeing_method', models.CharField(choices=[('exhaust', 'Exhaust'), ('continuous', 'Continuous'), ('semi-continuous', 'Semi-continuous')], max_length=20)),
                ('machine_type', models.CharField(choices=[('jigger', 'Jigger'), ('winch', 'Winch'), ('jet', 'Jet'), ('overflow', 'Overflow'), ('continuous_range', 'Continuous Range')], max_length=20)),
                ('liquor_ratio', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('chemicals', models.JSONField(blank=True, default=list)),
                ('color_fastness', models.JSONField(blank=True, default=dict)),
                ('shade', models.JSONField(blank=True, default=dict)),
                ('water_usage', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=15)),
                ('energy_consumption', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=15)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('production_order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='%(class)s_records', to='production.productionorder')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Dyeing records',
                'ordering': ['-created_at', '-id'],
                'abstract': False,
                'unique_together': {('company', 'batch_number')},
            },
        ),
        migrations.CreateModel(
            name='Printing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch_number', models.CharField(blank=True, max_length=40)),
                ('stage_number', models.PositiveSmallIntegerField(default=0)),
                ('machine_id', models.CharField(blank=True, max_length=60)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('on_hold', 'On Hold'), ('rejected', 'Rejected'), ('rework', 'Rework')], default='pending', max_length=20)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('input_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('output_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('waste_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('efficiency', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=6)),
                ('process_parameters', models.JSONField(blank=True, default=dict)),
                ('quality_checks', models.JSONField(blank=True, default=list)),
                ('issues', models.JSONField(blank=True, default=list)),
                ('rework_details', models.JSONField(blank=True, default=dict)),
                ('cost_breakdown', models.JSONField(blank=True, default=dict)),
                ('total_cost', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('process_images', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('printing_type', models.CharField(choices=[('screen', 'Screen'), ('digital', 'Digital'), ('rotary', 'Rotary'), ('flatbed', 'Flatbed'), ('roller', 'Roller'), ('heat_transfer', 'Heat Transfer'), ('sublimation', 'Sublimation')], max_length=20)),
                ('printing_method', models.CharField(choices=[('direct', 'Direct'), ('discharge', 'Discharge'), ('resist', 'Resist'), ('pigment', 'Pigment'), ('reactive', 'Reactive'), ('acid', 'Acid')], max_length=20)),
                ('machine_type', models.CharField(choices=[('manual', 'Manual'), ('automatic', 'Automatic'), ('semi_automatic', 'Semi-automatic')], max_length=20)),
                ('design', models.JSONField(blank=True, default=dict)),
                ('inks', models.JSONField(blank=True, default=list)),
                ('color_accuracy', models.JSONField(blank=True, default=dict)),
                ('registration', models.JSONField(blank=True, default=dict)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('production_order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='%(class)s_records', to='production.productionorder')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Printing records',
                'ordering': ['-created_at', '-id'],
                'abstract': False,
                'unique_together': {('company', 'batch_number')},
            },
        ),
        migrations.CreateModel(
            name='Finishing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch_number', models.CharField(blank=True, max_length=40)),
                ('stage_number', models.PositiveSmallIntegerField(default=0)),
                ('machine_id', models.CharField(blank=True, max_length=60)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('on_hold', 'On Hold'), ('rejected', 'Rejected'), ('rework', 'Rework')], default='pending', max_length=20)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('input_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('output_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('waste_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('efficiency', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=6)),
                ('process_parameters', models.JSONField(blank=True, default=dict)),
                ('quality_checks', models.JSONField(blank=True, default=list)),
                ('issues', models.JSONField(blank=True, default=list)),
                ('rework_details', models.JSONField(blank=True, default=dict)),
                ('cost_breakdown', models.JSONField(blank=True, default=dict)),
                ('total_cost', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('process_images', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('finishing_type', models.CharField(choices=[('stenter', 'Stenter'), ('coating', 'Coating'), ('calendering', 'Calendering'), ('compacting', 'Compacting'), ('sanforizing', 'Sanforizing'), ('mercerizing', 'Mercerizing'), ('softening', 'Softening')], max_length=20)),
                ('machine_type', models.CharField(choices=[('stenter_frame', 'Stenter Frame'), ('coating_machine', 'Coating Machine'), ('calendar_machine', 'Calendar Machine'), ('compactor', 'Compactor'), ('sanforizer', 'Sanforizer'), ('mercerizer', 'Mercerizer')], max_length=20)),
                ('stenter_settings', models.JSONField(blank=True, default=dict)),
                ('coating_settings', models.JSONField(blank=True, default=dict)),
                ('chemicals', models.JSONField(blank=True, default=list)),
                ('dimensional_stability', models.JSONField(blank=True, default=dict)),
                ('hand_feel', models.JSONField(blank=True, default=dict)),
                ('appearance', models.JSONField(blank=True, default=dict)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('production_order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='%(class)s_records', to='production.productionorder')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Finishing records',
                'ordering': ['-created_at', '-id'],
                'abstract': False,
                'unique_together': {('company', 'batch_number')},
            },
        ),
        migrations.CreateModel(
            name='CuttingPacking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch_number', models.CharField(blank=True, max_length=40)),
                ('stage_number', models.PositiveSmallIntegerField(default=0)),
                ('machine_id', models.CharField(blank=True, max_length=60)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('on_hold', 'On Hold'), ('rejected', 'Rejected'), ('rework', 'Rework')], default='pending', max_length=20)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('input_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('output_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('waste_quantity', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('efficiency', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=6)),
                ('process_parameters', models.JSONField(blank=True, default=dict)),
                ('quality_checks', models.JSONField(blank=True, default=list)),
                ('issues', models.JSONField(blank=True, default=list)),
                ('rework_details', models.JSONField(blank=True, default=dict)),
                ('cost_breakdown', models.JSONField(blank=True, default=dict)),
                ('total_cost', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('process_images', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('cutting_type', models.CharField(choices=[('manual', 'Manual'), ('automatic', 'Automatic'), ('laser', 'Laser'), ('water_jet', 'Water Jet'), ('die_cutting', 'Die Cutting')], max_length=20)),
                ('cutting_method', models.CharField(choices=[('straight', 'Straight'), ('pattern', 'Pattern'), ('contour', 'Contour'), ('layered', 'Layered')], max_length=20)),
                ('machine_type', models.CharField(choices=[('straight_knife', 'Straight Knife'), ('round_knife', 'Round Knife'), ('band_knife', 'Band Knife'), ('laser_cutter', 'Laser Cutter'), ('water_jet', 'Water Jet'), ('die_cutter', 'Die Cutter')], max_length=20)),
                ('packing_type', models.CharField(choices=[('carton', 'Carton'), ('poly_bag', 'Poly Bag'), ('shrink_wrap', 'Shrink Wrap'), ('vacuum_pack', 'Vacuum Pack'), ('roll_pack', 'Roll Pack')], max_length=20)),
                ('packing_method', models.CharField(choices=[('manual', 'Manual'), ('semi_automatic', 'Semi-automatic'), ('automatic', 'Automatic')], default='manual', max_length=20)),
                ('cutting_settings', models.JSONField(blank=True, default=dict)),
                ('pattern', models.JSONField(blank=True, default=dict)),
                ('packing_specs', models.JSONField(blank=True, default=dict)),
                ('pieces', models.JSONField(blank=True, default=list)),
                ('cutting_accuracy', models.JSONField(blank=True, default=dict)),
                ('packing_quality', models.JSONField(blank=True, default=dict)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('production_order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='%(class)s_records', to='production.productionorder')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Cutting & packing records',
                'ordering': ['-created_at', '-id'],
                'abstract': False,
                'unique_together': {('company', 'batch_number')},
            },
        ),
    ]
