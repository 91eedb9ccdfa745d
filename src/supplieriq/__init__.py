"""
SupplierIQ - supplier recommendations for procurement requests

A new request is published on an in-process notification channel; the
suggestion pipeline scores every active supplier in the request's category
for fit (match score) and reliability (risk score), ranks them and stores
the ranking for later retrieval.
"""

from supplieriq.app import SupplierIQ

__version__ = "0.1.0"
__all__ = ["SupplierIQ", "__version__"]
