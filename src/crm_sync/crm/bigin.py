"""CRMClient over the Zoho Bigin REST API (v2)."""

import logging
import os
from typing import Any, Optional

import httpx

from .client import CRMClient, CRMRequestError, DuplicateRecordError

logger = logging.getLogger(__name__)

# CRM object kind -> Bigin module
MODULES = {
    "Contact": "Contacts",
    "Company": "Accounts",
    "Deal": "Pipelines",
    "Product": "Products",
}


class BiginCRMClient(CRMClient):
    """
    Thin Bigin client: one request per operation, no retry and no token refresh.
    The access token comes from the caller or CRM_SYNC_ACCESS_TOKEN.
    """

    DEFAULT_BASE_URL = "https://www.zohoapis.com/bigin/v2"

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        token = access_token or os.environ.get("CRM_SYNC_ACCESS_TOKEN")
        if not token:
            raise ValueError("No CRM access token. Pass access_token or set CRM_SYNC_ACCESS_TOKEN")
        self.base_url = (base_url or os.environ.get("CRM_SYNC_API_BASE_URL") or self.DEFAULT_BASE_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=30.0)
        self._headers = {
            "Authorization": f"Zoho-oauthtoken {token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> Optional[dict[str, Any]]:
        url = f"{self.base_url}/{path}"
        try:
            response = self._client.request(method, url, headers=self._headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CRMRequestError(
                f"{method} {path} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise CRMRequestError(f"{method} {path} failed: {e}") from e
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _search(self, kind: str, field: str, value: str) -> Optional[dict[str, Any]]:
        body = self._request(
            "GET",
            f"{MODULES[kind]}/search",
            params={"criteria": f"({field}:equals:{value})"},
        )
        records = (body or {}).get("data") or []
        return records[0] if records else None

    def _write(self, method: str, kind: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        body = self._request(method, path, json={"data": [payload]})
        results = (body or {}).get("data") or []
        if not results:
            raise CRMRequestError(f"No {kind} data returned from API")
        result = results[0]
        if result.get("code") == "DUPLICATE_DATA":
            duplicate = (result.get("details") or {}).get("api_name")
            raise DuplicateRecordError(kind, duplicate)
        if result.get("status") == "error":
            raise CRMRequestError(f"{kind} rejected: {result.get('code')} {result.get('message', '')}".strip())
        record_id = (result.get("details") or {}).get("id")
        logger.info("%s %s %s", method, kind, record_id)
        return {**payload, "id": record_id}

    def create_contact(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._write("POST", "Contact", MODULES["Contact"], payload)

    def find_contact_by_email(self, email: str) -> Optional[dict[str, Any]]:
        return self._search("Contact", "Email", email)

    def create_company(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._write("POST", "Company", MODULES["Company"], payload)

    def find_company_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._search("Company", "Account_Name", name)

    def create_deal(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._write("POST", "Deal", MODULES["Deal"], payload)

    def find_deal_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._search("Deal", "Deal_Name", name)

    def update_deal(self, deal_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        record = self._write("PUT", "Deal", f"{MODULES['Deal']}/{deal_id}", payload)
        record["id"] = record.get("id") or deal_id
        return record

    def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._write("POST", "Product", MODULES["Product"], payload)

    def find_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return self._search("Product", "Product_Name", name)
