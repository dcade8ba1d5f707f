"""
Initial migration for Tillman models.
"""

from decimal import Decimal
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Tillman tables: ProductRow, StockRow, HistoryRow."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ProductRow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(help_text='Product id referenced by stock rows', unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=120, verbose_name='Name')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit price')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='StockRow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.CharField(db_index=True, max_length=50, verbose_name='Product')),
                ('credential', models.TextField(help_text='Delivered to the buyer on settlement', verbose_name='Credential')),
                ('status', models.CharField(choices=[('available', 'Available'), ('held', 'Held'), ('sold', 'Sold')], db_index=True, default='available', max_length=20, verbose_name='Status')),
                ('holder_id', models.CharField(blank=True, db_index=True, help_text='Reservation id while held, order id once sold', max_length=64, null=True, verbose_name='Holder')),
            ],
            options={
                'verbose_name': 'Stock item',
                'verbose_name_plural': 'Stock items',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['product_id', 'status'], name='tillman_stock_prod_status')],
            },
        ),
        migrations.CreateModel(
            name='HistoryRow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Date')),
                ('buyer_id', models.CharField(db_index=True, max_length=64, verbose_name='Buyer')),
                ('buyer_username', models.CharField(blank=True, default='', max_length=150)),
                ('product_id', models.CharField(max_length=50, verbose_name='Product')),
                ('product_name', models.CharField(blank=True, default='', max_length=120)),
                ('credential', models.TextField(verbose_name='Credential')),
                ('reservation_id', models.CharField(db_index=True, max_length=64)),
                ('order_id', models.CharField(db_index=True, max_length=64, verbose_name='Order')),
            ],
            options={
                'verbose_name': 'Sale',
                'verbose_name_plural': 'Sales',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
