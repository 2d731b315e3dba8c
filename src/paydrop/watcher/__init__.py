"""Deposit watching: payer resolution, fulfillment, and the scan loop."""

from paydrop.watcher.fulfillment import FulfillmentInvoker
from paydrop.watcher.reconciler import Reconciler
from paydrop.watcher.resolver import PayerResolver
from paydrop.watcher.scheduler import PeriodicTask

__all__ = ["FulfillmentInvoker", "Reconciler", "PayerResolver", "PeriodicTask"]
