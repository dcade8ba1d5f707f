"""
Backend loader — builds the adapters named in settings.

Usage:
    from tillman.adapters import load_backend

    store = load_backend("ROW_STORE")

Settings:
    TILLMAN = {
        "ROW_STORE": "tillman.adapters.orm.DjangoRowStore",
        "PAYMENT_VERIFIER": "myshop.payos.PayOSVerifier",
    }

An empty or unimportable path raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from tillman.conf import tillman_settings

logger = logging.getLogger(__name__)


def load_backend(setting: str) -> Any:
    """
    Instantiate the class configured under ``TILLMAN[setting]``.

    Args:
        setting: Key in TillmanSettings (e.g. "OPERATOR_NOTIFIER")

    Returns:
        A new instance of the configured class

    Raises:
        ImproperlyConfigured: If the path is empty or the import fails
    """
    path = getattr(tillman_settings, setting)
    if not path:
        raise ImproperlyConfigured(
            f"TILLMAN['{setting}'] must be configured."
        )
    try:
        backend_class = import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(
            f"Failed to import {setting} '{path}': {e}"
        ) from e
    logger.debug("Loaded %s: %s", setting, path)
    return backend_class()
