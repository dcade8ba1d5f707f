"""
HTTP entry points: payment gateway webhook and the reconcile trigger.

Both are async views and share the process-wide Shop, so the project must
run under ASGI with a single worker process.
"""

import hmac
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from tillman.adapters.loader import load_backend
from tillman.conf import tillman_settings
from tillman.exceptions import PaymentError
from tillman.service import get_shop

logger = logging.getLogger('tillman')


@csrf_exempt
@require_POST
async def payment_webhook(request):
    """
    Receive a payment notification.

    Any verified payload is acknowledged with ``{"success": true}``, whatever
    the settlement outcome, so the gateway stops retrying.
    """
    try:
        payload = json.loads(request.body or b'{}')
        event = load_backend('PAYMENT_VERIFIER').verify(payload)
    except (ValueError, PaymentError) as e:
        logger.warning("webhook.rejected", extra={"error": str(e)})
        return JsonResponse({'success': False}, status=400)

    shop = get_shop()
    await shop.start()
    outcome = await shop.handle_payment(event)
    return JsonResponse({'success': True, 'outcome': outcome.value})


@csrf_exempt
@require_POST
async def reconcile(request):
    """
    Administrator trigger for the reconciliation sweep.

    Requires the ``X-Tillman-Token`` header to match TILLMAN['ADMIN_TOKEN'].
    """
    expected = tillman_settings.ADMIN_TOKEN
    given = request.headers.get('X-Tillman-Token', '')
    if not expected or not hmac.compare_digest(given, expected):
        return JsonResponse({'error': 'forbidden'}, status=403)

    shop = get_shop()
    await shop.start()
    result = await shop.reconcile()
    return JsonResponse({'released': result.released, 'failed': result.failed})
