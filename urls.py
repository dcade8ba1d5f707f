"""
URLconf for Tillman.

    path("shop/", include("tillman.urls")),
"""

from django.urls import path

from tillman import views

app_name = 'tillman'

urlpatterns = [
    path('webhook/', views.payment_webhook, name='payment-webhook'),
    path('reconcile/', views.reconcile, name='reconcile'),
]
