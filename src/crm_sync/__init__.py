"""Webhook normalization, lifecycle classification and CRM sync for product-license events."""

__version__ = "0.1.0"
