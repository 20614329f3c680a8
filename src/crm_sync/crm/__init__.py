"""CRM payload mapping and client-facing sync."""

from crm_sync.crm.bigin import BiginCRMClient
from crm_sync.crm.client import (
    CRMClient,
    CRMError,
    CRMRequestError,
    DuplicateRecordError,
    InMemoryCRMClient,
)
from crm_sync.crm.mapper import CRMFormatMapper, contact_last_name, to_crm_format
from crm_sync.crm.sync import CRMSync

__all__ = [
    "BiginCRMClient",
    "CRMClient",
    "CRMError",
    "CRMFormatMapper",
    "CRMRequestError",
    "CRMSync",
    "DuplicateRecordError",
    "InMemoryCRMClient",
    "contact_last_name",
    "to_crm_format",
]
