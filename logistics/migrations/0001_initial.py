import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Courier',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('full_name', models.CharField(max_length=150, verbose_name='Full name')),
                ('email', models.CharField(blank=True, max_length=254, verbose_name='E-mail')),
                ('phone', models.CharField(max_length=30, verbose_name='Phone')),
                ('vehicle_type', models.CharField(blank=True, max_length=50, verbose_name='Vehicle type')),
                ('license_number', models.CharField(blank=True, max_length=50, verbose_name='License number')),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=20, verbose_name='Status')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='courier_profile', to=settings.AUTH_USER_MODEL, verbose_name='Linked account')),
            ],
            options={
                'verbose_name': 'Courier',
                'verbose_name_plural': 'Couriers',
                'db_table': 'couriers',
                'ordering': ['full_name'],
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('full_name', models.CharField(max_length=150, verbose_name='Full name')),
                ('email', models.CharField(blank=True, max_length=254, verbose_name='E-mail')),
                ('phone', models.CharField(max_length=30, verbose_name='Phone')),
                ('address', models.CharField(max_length=255, verbose_name='Address')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_profile', to=settings.AUTH_USER_MODEL, verbose_name='Linked account')),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'db_table': 'customers',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Shipment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tracking_number', models.CharField(editable=False, max_length=11, unique=True, validators=[django.core.validators.RegexValidator(message='Format: SW followed by 9 digits', regex='^SW\\d{9}$')], verbose_name='Tracking number')),
                ('sender_name', models.CharField(max_length=150, verbose_name='Sender name')),
                ('sender_phone', models.CharField(max_length=30, verbose_name='Sender phone')),
                ('sender_address', models.CharField(max_length=255, verbose_name='Sender address')),
                ('recipient_name', models.CharField(max_length=150, verbose_name='Recipient name')),
                ('recipient_phone', models.CharField(max_length=30, verbose_name='Recipient phone')),
                ('recipient_address', models.CharField(max_length=255, verbose_name='Recipient address')),
                ('package_weight', models.DecimalField(decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Weight (kg)')),
                ('package_dimensions', models.CharField(max_length=50, verbose_name='Dimensions (LxWxH)')),
                ('service_type', models.CharField(choices=[('standard', 'Standard'), ('express', 'Express'), ('overnight', 'Overnight')], default='standard', max_length=20, verbose_name='Service')),
                ('status', models.CharField(default='pending', max_length=30, verbose_name='Status')),
                ('estimated_delivery', models.DateTimeField(blank=True, null=True, verbose_name='Estimated delivery')),
                ('actual_delivery', models.DateTimeField(blank=True, null=True, verbose_name='Delivered at')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, verbose_name='Price')),
                ('notes', models.TextField(blank=True, null=True, verbose_name='Notes')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('courier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments', to='logistics.courier', verbose_name='Courier')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shipments', to='logistics.customer', verbose_name='Customer')),
            ],
            options={
                'verbose_name': 'Shipment',
                'verbose_name_plural': 'Shipments',
                'db_table': 'shipments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['customer', '-created_at'], name='shipments_customer_created'),
                    models.Index(fields=['status', 'created_at'], name='shipments_status_created'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TrackingEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(max_length=30, verbose_name='Status')),
                ('location', models.CharField(blank=True, max_length=255, verbose_name='Location')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('shipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='logistics.shipment', verbose_name='Shipment')),
            ],
            options={
                'verbose_name': 'Tracking event',
                'verbose_name_plural': 'Tracking events',
                'db_table': 'tracking_events',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['shipment', '-created_at'], name='events_shipment_created'),
                ],
            },
        ),
    ]
