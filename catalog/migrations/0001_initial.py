from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, help_text='Product name for display and search', max_length=200)),
                ('quantity', models.PositiveIntegerField(default=0, help_text='Current stock quantity')),
                ('price', models.DecimalField(decimal_places=2, help_text='Unit price (must be positive)', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('offer', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Percentage discount between 0 and 100', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))])),
                ('category', models.CharField(choices=[('Frames', 'Frames'), ('Wall Hanging', 'Wall Hanging'), ('Bag', 'Bag'), ('Pen Stand', 'Pen Stand'), ('Jewellery', 'Jewellery'), ('Diyas', 'Diyas'), ('Bottle Art', 'Bottle Art')], db_index=True, help_text='Product category', max_length=30)),
                ('image', models.CharField(blank=True, default='', help_text='Optional image URL', max_length=500)),
                ('status', models.CharField(choices=[('Available', 'Available'), ('Not Available', 'Not Available')], db_index=True, default='Not Available', help_text='Derived from quantity on save', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['category', 'status'], name='catalog_prod_cat_status_idx'),
                    models.Index(fields=['price'], name='catalog_prod_price_idx'),
                ],
            },
        ),
    ]
