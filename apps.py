"""Django app configuration for Tillman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TillmanConfig(AppConfig):
    """Configuration for Tillman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tillman"
    verbose_name = _("Shop Stock")
