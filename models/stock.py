"""
StockRow model — One serialized unit for sale.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from tillman.models.enums import ItemStatus


class StockRow(models.Model):
    """
    A single credential pair.

    Row store table: ``stock``. Status and holder only change through
    the stock ledger.

    LIFECYCLE:

        AVAILABLE ──reserve()──► HELD ──finalize()──► SOLD
            ▲                     │
            └──release()/sweep────┘
    """

    product_id = models.CharField(
        max_length=50,
        db_index=True,
        verbose_name=_('Product'),
    )
    credential = models.TextField(
        verbose_name=_('Credential'),
        help_text=_('Delivered to the buyer on settlement'),
    )
    status = models.CharField(
        max_length=20,
        choices=ItemStatus.choices,
        default=ItemStatus.AVAILABLE,
        db_index=True,
        verbose_name=_('Status'),
    )
    holder_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Holder'),
        help_text=_('Reservation id while held, order id once sold'),
    )

    class Meta:
        verbose_name = _('Stock item')
        verbose_name_plural = _('Stock items')
        ordering = ['id']
        indexes = [
            models.Index(fields=['product_id', 'status'], name='tillman_stock_prod_status'),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} #{self.pk} ({self.status})"
