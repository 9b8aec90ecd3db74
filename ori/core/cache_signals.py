"""
Cache invalidation signals
Automatically invalidate cached lists and dashboards when data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    invalidate_products_cache,
    invalidate_dashboard_cache,
    invalidate_pipeline_cache,
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

PRODUCT_MODELS = {'Category', 'Product', 'ProductLot'}
DASHBOARD_MODELS = {
    'Product', 'ProductLot', 'LotStock', 'InventoryMove', 'Quote', 'SalesOrder', 'Invoice', 'Payment',
    'Expense', 'Commission', 'PurchaseOrder', 'Delivery', 'Task',
}
PIPELINE_MODELS = {'Prospect', 'Company', 'Quote', 'Sample', 'SalesOrder', 'PurchaseOrder', 'Task'}


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals.
    Used by bulk operations (imports, relay upserts); invalidate manually afterwards.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_model_caches(sender, instance, **kwargs):
    """Invalidate cached lists and dashboards affected by a model change"""
    if is_suspended():
        return

    model_name = sender.__name__
    try:
        if model_name in PRODUCT_MODELS:
            # Invalidate after commit so the cache is not repopulated with stale rows
            transaction.on_commit(invalidate_products_cache)
        if model_name in DASHBOARD_MODELS:
            transaction.on_commit(invalidate_dashboard_cache)
        if model_name in PIPELINE_MODELS:
            transaction.on_commit(invalidate_pipeline_cache)
    except Exception as e:
        logger.warning(f"Error in cache invalidation signal for {model_name}: {e}")
