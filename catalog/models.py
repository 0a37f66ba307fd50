"""
Catalog Models - Products offered in the storefront.

Models:
    - Product: Sellable item carrying its own stock count, unit price and
      percentage offer. ``status`` is derived from ``quantity``.
"""
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Product(models.Model):
    """
    Product entity. Stock lives on the product itself.

    Status:
        - AVAILABLE: quantity > 0
        - NOT_AVAILABLE: quantity == 0
    """

    class Status(models.TextChoices):
        AVAILABLE = 'Available', 'Available'
        NOT_AVAILABLE = 'Not Available', 'Not Available'

    class Category(models.TextChoices):
        FRAMES = 'Frames', 'Frames'
        WALL_HANGING = 'Wall Hanging', 'Wall Hanging'
        BAG = 'Bag', 'Bag'
        PEN_STAND = 'Pen Stand', 'Pen Stand'
        JEWELLERY = 'Jewellery', 'Jewellery'
        DIYAS = 'Diyas', 'Diyas'
        BOTTLE_ART = 'Bottle Art', 'Bottle Art'

    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Product name for display and search"
    )
    quantity = models.PositiveIntegerField(
        default=0,
        help_text="Current stock quantity"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Unit price (must be positive)"
    )
    offer = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        help_text="Percentage discount between 0 and 100"
    )
    category = models.CharField(
        max_length=30,
        choices=Category.choices,
        db_index=True,
        help_text="Product category"
    )
    image = models.CharField(
        max_length=500,
        blank=True,
        default='',
        help_text="Optional image URL"
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NOT_AVAILABLE,
        db_index=True,
        help_text="Derived from quantity on save"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'status'], name='catalog_prod_cat_status_idx'),
            models.Index(fields=['price'], name='catalog_prod_price_idx'),
        ]

    def __str__(self):
        return f"{self.name} (${self.price})"

    def save(self, *args, **kwargs):
        self.status = self.derived_status(self.quantity)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'quantity' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'status'}
        super().save(*args, **kwargs)

    @classmethod
    def derived_status(cls, quantity: int) -> str:
        return cls.Status.AVAILABLE if quantity > 0 else cls.Status.NOT_AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.status == self.Status.AVAILABLE

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0
