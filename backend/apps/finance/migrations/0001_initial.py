import decimal

import django.db.models.deletion
import django.utils.timezone
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
            name='Invoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('invoice_number', models.CharField(blank=True, max_length=32)),
                ('invoice_date', models.DateField(default=django.utils.timezone.localdate)),
                ('due_date', models.DateField()),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('billing_address', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('terms', models.TextField(blank=True)),
                ('subtotal', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('taxable_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('total_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('paid_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('outstanding_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('overdue_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='sales.customer')),
                ('customer_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invoices', to='sales.customerorder')),
            ],
            options={
                'ordering': ['-invoice_date', '-id'],
                'indexes': [
                    models.Index(fields=['company', 'status'], name='finance_inv_company_b54bdb_idx'),
                    models.Index(fields=['company', 'due_date'], name='finance_inv_company_954c5c_idx'),
                ],
                'unique_together': {('company', 'invoice_number')},
            },
        ),
        migrations.CreateModel(
            name='InvoiceItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255)),
                ('hsn_code', models.CharField(blank=True, max_length=16)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=15)),
                ('unit', models.CharField(default='meters', max_length=20)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=20)),
                ('discount_type', models.CharField(choices=[('percentage', 'Percentage'), ('fixed', 'Fixed Amount')], default='percentage', max_length=10)),
                ('discount_value', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=5)),
                ('gross_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('taxable_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('line_total', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='finance.invoice')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='InvoicePayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_date', models.DateField(default=django.utils.timezone.localdate)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=20)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('cheque', 'Cheque'), ('bank_transfer', 'Bank Transfer'), ('upi', 'UPI'), ('card', 'Card'), ('other', 'Other')], default='bank_transfer', max_length=20)),
                ('reference', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='finance.invoice')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-payment_date', '-id'],
            },
        ),
    ]
