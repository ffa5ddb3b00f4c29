from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError as ModelValidationError

from config import HTTP_TIMEOUT, MARKETPLACE_ACCESS_TOKEN, MARKETPLACE_API_URL, MARKETPLACE_REFRESH_TOKEN
from authoring.errors import AuthoringError
from authoring.helpers import flatten_error_detail
from authoring.schemas import Category, MediaRecord, ProductRead, ProductWrite, StagedFile


class MarketplaceApiError(AuthoringError):
    def __init__(self, message: str, *, status_code: int | None = None, path: str = "", detail: Any = None):
        self.status_code = status_code
        self.path = path
        self.detail = detail
        super().__init__(message)


class MarketplaceClient:
    """
    Thin async client over the marketplace REST backend.
    base_url looks like 'https://api.mhebazar.com/api'.
    """

    REFRESH_PATH = "/token/refresh/"

    def __init__(
            self,
            base_url: str | None = MARKETPLACE_API_URL,
            access_token: str | None = MARKETPLACE_ACCESS_TOKEN,
            refresh_token: str | None = MARKETPLACE_REFRESH_TOKEN,
            *,
            timeout: float = HTTP_TIMEOUT,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.access_token = access_token or None
        self.refresh_token = refresh_token or None
        self.timeout = timeout
        self._transport = transport
        self.log = logging.getLogger(self.__class__.__name__)

    # ===================== tokens =====================

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token: headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _refresh_access_token(self, client: httpx.AsyncClient) -> bool:
        if not self.refresh_token:
            return False
        resp = await client.post(f"{self.base_url}{self.REFRESH_PATH}", json={"refresh": self.refresh_token})
        if resp.status_code >= 400:
            self.log.error("Token refresh failed (%s): %s", resp.status_code, resp.text[:300])
            return False
        try: data = resp.json()
        except ValueError:
            self.log.error("Token refresh returned a non-JSON body: %s", resp.text[:300])
            return False
        if not isinstance(data, dict) or not data.get("access"):
            return False
        self.access_token = data["access"]
        if data.get("refresh"): self.refresh_token = data["refresh"]
        self.log.info("🔁 Access token refreshed")
        return True

    # ===================== base request =====================

    async def _request(
            self,
            method: str,
            path: str,
            *,
            params: dict[str, Any] | None = None,
            json: Any | None = None,
            files: list[tuple[str, tuple[str, bytes, str]]] | None = None,
    ) -> Any:
        """
        Low level call. path must start with '/', e.g. '/products/'.
        Returns the decoded JSON body, or None for empty responses.
        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method.upper(), url, params=params, json=json, files=files, headers=self._headers())
                if resp.status_code == 401 and await self._refresh_access_token(client):
                    resp = await client.request(method.upper(), url, params=params, json=json, files=files, headers=self._headers())
        except httpx.HTTPError as e:
            self.log.error("Marketplace API transport error %s %s: %s", method, path, e)
            raise MarketplaceApiError(f"Could not reach the marketplace: {e}", path=path) from e

        if resp.status_code >= 400:
            try: detail = resp.json()
            except ValueError: detail = resp.text
            self.log.error("Marketplace API error %s %s (%s): %s", method, path, resp.status_code, resp.text[:500])
            message = flatten_error_detail(detail) or f"Request failed with status {resp.status_code}"
            raise MarketplaceApiError(message, status_code=resp.status_code, path=path, detail=detail)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    def _parse(self, model: type[BaseModel], data: Any, path: str):
        """Validates a successful reply; a body the models reject is reported like any other API failure."""
        try:
            return model.model_validate(data)
        except ModelValidationError as e:
            self.log.error("Unexpected reply from %s: %s", path, e)
            raise MarketplaceApiError(f"Unexpected reply from the marketplace ({path})", path=path, detail=data) from e

    # ===================== high-level methods =====================

    async def get_categories(self) -> list[Category]:
        """GET /categories/: plain list or paginated {"results": [...]}"""
        data = await self._request("GET", "/categories/")
        if isinstance(data, dict): data = data.get("results") or []
        if not isinstance(data, list):
            return []
        return [self._parse(Category, c, "/categories/") for c in data]

    async def create_product(self, payload: ProductWrite) -> ProductRead:
        data = await self._request("POST", "/products/", json=payload.model_dump(mode="json"))
        return self._parse(ProductRead, data, "/products/")

    async def update_product(self, product_id: int, payload: ProductWrite) -> ProductRead:
        path = f"/products/{product_id}/"
        data = await self._request("PATCH", path, json=payload.model_dump(mode="json"))
        return self._parse(ProductRead, data, path)

    async def get_product(self, product_id: int) -> ProductRead:
        path = f"/products/{product_id}/"
        data = await self._request("GET", path)
        return self._parse(ProductRead, data, path)

    async def upload_brochure(self, product_id: int, file: StagedFile) -> str | None:
        """Returns the stored brochure URL when the backend reports it."""
        data = await self._request(
            "POST",
            f"/products/{product_id}/brochure/",
            files=[("brochure", (file.filename, file.content, file.content_type))],
        )
        if isinstance(data, dict): return data.get("brochure") or data.get("url")
        return None

    async def upload_images(self, product_id: int, files: list[StagedFile]) -> list[MediaRecord]:
        """Uploads an ordered batch; the backend answers with the created records in the same order."""
        path = f"/products/{product_id}/images/"
        data = await self._request(
            "POST",
            path,
            files=[("images", (f.filename, f.content, f.content_type)) for f in files],
        )
        if isinstance(data, dict): data = data.get("results") or data.get("images") or data.get("media") or []
        if not isinstance(data, list):
            raise MarketplaceApiError(f"Unexpected reply from the marketplace ({path})", path=path, detail=data)
        return [self._parse(MediaRecord, r, path) for r in data]

    async def delete_media(self, product_id: int, media_ids: list[int]) -> None:
        await self._request("DELETE", f"/products/{product_id}/media/", json={"media_ids": list(media_ids)})

    async def delete_brochure(self, product_id: int) -> None:
        await self._request("DELETE", f"/products/{product_id}/brochure/")
