"""
Tests for the sweep_orphan_holds management command.
"""

from io import StringIO

import pytest
from django.core.management import call_command

from tillman.models import ItemStatus, StockRow


pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def orm_backend(settings):
    settings.TILLMAN = {**settings.TILLMAN, 'ROW_STORE': 'tillman.adapters.orm.DjangoRowStore'}


@pytest.fixture
def stranded():
    StockRow.objects.create(product_id='netflix', credential='a | 1')
    StockRow.objects.create(product_id='netflix', credential='b | 2',
                            status=ItemStatus.HELD, holder_id='17000')
    StockRow.objects.create(product_id='netflix', credential='c | 3',
                            status=ItemStatus.SOLD, holder_id='ORD_BOT_1')


def test_dry_run_changes_nothing(stranded):
    out = StringIO()

    call_command('sweep_orphan_holds', '--dry-run', stdout=out)

    assert '1 held item(s) would be released' in out.getvalue()
    assert StockRow.objects.filter(status=ItemStatus.HELD).count() == 1


def test_sweep_releases_held_items(stranded):
    out = StringIO()

    call_command('sweep_orphan_holds', stdout=out)

    assert '1 held item(s) released' in out.getvalue()
    assert not StockRow.objects.filter(status=ItemStatus.HELD).exists()
    assert StockRow.objects.get(credential='b | 2').holder_id is None
    assert StockRow.objects.get(credential='c | 3').status == ItemStatus.SOLD


def test_sweep_with_nothing_held():
    out = StringIO()

    call_command('sweep_orphan_holds', stdout=out)

    assert '0 held item(s) released' in out.getvalue()
