"""
HistoryRow model — Append-only sales audit.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class HistoryRow(models.Model):
    """
    One sold item.

    Rules:
    - Written exactly once per sold stock item, on settlement
    - NEVER update() or delete()

    Row store table: ``history``.
    """

    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Date'))
    buyer_id = models.CharField(max_length=64, db_index=True, verbose_name=_('Buyer'))
    buyer_username = models.CharField(max_length=150, blank=True, default='')
    product_id = models.CharField(max_length=50, verbose_name=_('Product'))
    product_name = models.CharField(max_length=120, blank=True, default='')
    credential = models.TextField(verbose_name=_('Credential'))
    reservation_id = models.CharField(max_length=64, db_index=True)
    order_id = models.CharField(max_length=64, db_index=True, verbose_name=_('Order'))

    class Meta:
        verbose_name = _('Sale')
        verbose_name_plural = _('Sales')
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.order_id} → {self.buyer_username or self.buyer_id}"
