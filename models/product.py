"""
ProductRow model — Catalog reference data.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class ProductRow(models.Model):
    """
    Product on sale. Edited by shop admins, read by Tillman.

    Row store table: ``products``.
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Product id referenced by stock rows'),
    )
    name = models.CharField(max_length=120, verbose_name=_('Name'))
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Unit price'),
    )

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['code']

    def __str__(self) -> str:
        return self.name
