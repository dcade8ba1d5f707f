"""
Tillman Admin.

- ProductRow: list + edit (catalog is maintained by shop admins)
- StockRow: read-only; status only changes through the stock ledger
- HistoryRow: read-only audit trail
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from tillman.models import HistoryRow, ItemStatus, ProductRow, StockRow


class ReadOnlyAdmin(admin.ModelAdmin):
    """No add/change/delete from the admin."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ProductRow)
class ProductRowAdmin(admin.ModelAdmin):
    """Product admin — editable."""

    list_display = ['code', 'name', 'unit_price', 'available_display']
    search_fields = ['code', 'name']

    @admin.display(description=_('Available'))
    def available_display(self, obj):
        return StockRow.objects.filter(product_id=obj.code, status=ItemStatus.AVAILABLE).count()


@admin.register(StockRow)
class StockRowAdmin(ReadOnlyAdmin):
    """Stock admin — read-only."""

    list_display = ['id', 'product_id', 'status', 'holder_id']
    list_filter = ['status', 'product_id']
    search_fields = ['holder_id']
    readonly_fields = ['product_id', 'status', 'holder_id']
    exclude = ['credential']


@admin.register(HistoryRow)
class HistoryRowAdmin(ReadOnlyAdmin):
    """History admin — read-only. Immutable audit trail."""

    list_display = ['created_at', 'order_id', 'buyer_username', 'buyer_id', 'product_name']
    list_filter = ['product_id']
    search_fields = ['order_id', 'buyer_id', 'buyer_username', 'reservation_id']
    readonly_fields = ['created_at', 'buyer_id', 'buyer_username', 'product_id',
                       'product_name', 'credential', 'reservation_id', 'order_id']
    date_hierarchy = 'created_at'
