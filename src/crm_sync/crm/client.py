"""CRM client interface, error types and an in-memory implementation."""

import itertools
from abc import ABC, abstractmethod
from typing import Any, Optional


class CRMError(Exception):
    """Base error for CRM client failures."""


class DuplicateRecordError(CRMError):
    """Create was rejected because a matching record already exists."""

    def __init__(self, kind: str, key: Optional[str] = None):
        self.kind = kind
        self.key = key
        super().__init__(f"Duplicate {kind}: {key}" if key else f"Duplicate {kind}")


class CRMRequestError(CRMError):
    """Transport or HTTP failure talking to the CRM."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class CRMClient(ABC):
    """
    Operations the sync layer needs from a CRM.
    find_* return the record dict (with an 'id') or None; create_*/update_deal
    return the stored record and raise CRMError subclasses on failure.
    """

    @abstractmethod
    def create_contact(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def find_contact_by_email(self, email: str) -> Optional[dict[str, Any]]:
        pass

    @abstractmethod
    def create_company(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def find_company_by_name(self, name: str) -> Optional[dict[str, Any]]:
        pass

    @abstractmethod
    def create_deal(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def find_deal_by_name(self, name: str) -> Optional[dict[str, Any]]:
        pass

    @abstractmethod
    def update_deal(self, deal_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def find_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        pass


class InMemoryCRMClient(CRMClient):
    """
    Dict-backed CRM for dry runs and tests.
    Lookups match on the same key fields the HTTP client searches by.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.contacts: dict[str, dict[str, Any]] = {}
        self.companies: dict[str, dict[str, Any]] = {}
        self.deals: dict[str, dict[str, Any]] = {}
        self.products: dict[str, dict[str, Any]] = {}

    def _store(self, table: dict[str, dict[str, Any]], kind: str, payload: dict[str, Any]) -> dict[str, Any]:
        record = {**payload, "id": f"{kind}_{next(self._ids)}"}
        table[record["id"]] = record
        return record

    @staticmethod
    def _find(table: dict[str, dict[str, Any]], field: str, value: str) -> Optional[dict[str, Any]]:
        for record in table.values():
            if record.get(field) == value:
                return record
        return None

    def create_contact(self, payload: dict[str, Any]) -> dict[str, Any]:
        email = payload.get("Email")
        if email and self._find(self.contacts, "Email", email):
            raise DuplicateRecordError("Contact", email)
        return self._store(self.contacts, "contact", payload)

    def find_contact_by_email(self, email: str) -> Optional[dict[str, Any]]:
        return self._find(self.contacts, "Email", email)

    def create_company(self, payload: dict[str, Any]) -> dict[str, Any]:
        name = payload.get("Account_Name")
        if name and self._find(self.companies, "Account_Name", name):
            raise DuplicateRecordError("Company", name)
        return self._store(self.companies, "company", payload)

    def find_company_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._find(self.companies, "Account_Name", name)

    def create_deal(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._store(self.deals, "deal", payload)

    def find_deal_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._find(self.deals, "Deal_Name", name)

    def update_deal(self, deal_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        if deal_id not in self.deals:
            raise CRMRequestError(f"Deal not found: {deal_id}", status_code=404)
        self.deals[deal_id] = {**self.deals[deal_id], **payload, "id": deal_id}
        return self.deals[deal_id]

    def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        name = payload.get("Product_Name")
        if name and self._find(self.products, "Product_Name", name):
            raise DuplicateRecordError("Product", name)
        return self._store(self.products, "product", payload)

    def find_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._find(self.products, "Product_Name", name)
