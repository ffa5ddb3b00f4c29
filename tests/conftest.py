"""Shared fixtures: a category tree, a fake marketplace backend and staged file factories."""

import json
import re
from typing import Any

import httpx
import pytest

from authoring.api import MarketplaceClient
from authoring.engine import CategoryDirectory
from authoring.schemas import Category, StagedFile

API_URL = "https://api.test/api"

KB = 1024

CATEGORY_TREE = [
    {
        "id": 1,
        "name": "Forklifts",
        "subcategories": [],
        "product_details": [
            {"name": "capacity", "label": "Capacity", "type": "text", "required": True},
            {"name": "mast", "label": "Mast", "type": "radio", "options": [
                {"label": "Duplex", "value": "duplex"},
                {"label": "Triplex", "value": "triplex"},
            ]},
        ],
    },
    {
        "id": 2,
        "name": "Batteries",
        "product_details": None,
        "subcategories": [
            {
                "id": 21,
                "name": "Lithium",
                "product_details": [
                    {"name": "voltage", "label": "Voltage", "type": "select", "required": True, "options": [
                        {"label": "24V", "value": "24"},
                        {"label": "48V", "value": "48"},
                    ]},
                    {"name": "features", "label": "Features", "type": "checkbox", "options": [
                        {"label": "Fast charge", "value": "fast"},
                        {"label": "BMS", "value": "bms"},
                        {"label": "Heating", "value": "heating"},
                    ]},
                ],
            },
            {"id": 22, "name": "Lead acid", "product_details": None},
        ],
    },
    {"id": 3, "name": "Spare parts", "subcategories": [], "product_details": []},
]


class FakeBackend:
    """
    In-memory marketplace backend behind httpx.MockTransport.
    Every request is recorded in `calls` as (method, path) with the '/api' prefix stripped.
    """

    def __init__(self, categories: list[dict] | None = None):
        self.categories = categories if categories is not None else CATEGORY_TREE
        self.products: dict[int, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.bodies: list[Any] = []
        self.uploaded: list[list[str]] = []
        self.failures: dict[tuple[str, str], tuple[int, Any]] = {}
        self.access_token = "good-token"
        self.refreshes = 0
        self.next_id = 100
        self.next_media_id = 1000

    def fail(self, method: str, path: str, status: int = 400, body: Any = None):
        self.failures[(method, path)] = (status, body if body is not None else {"detail": "Something broke"})

    def seed_product(self, product_id: int, **fields) -> dict:
        record = {
            "id": product_id, "category": 1, "subcategory": None, "name": "Seeded", "type": '["new"]',
            "product_details": "{}", "media": [], "brochure": None,
        }
        record.update(fields)
        self.products[product_id] = record
        return record

    # ===================== transport =====================

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.calls.append((method, path))

        if path == "/token/refresh/":
            self.refreshes += 1
            return httpx.Response(200, json={"access": self.access_token})

        if request.headers.get("Authorization") != f"Bearer {self.access_token}":
            return httpx.Response(401, json={"detail": "Given token not valid for any token type"})

        if (method, path) in self.failures:
            status, body = self.failures[(method, path)]
            return httpx.Response(status, json=body)

        if method == "GET" and path == "/categories/":
            return httpx.Response(200, json=self.categories)

        if method == "POST" and path == "/products/":
            body = json.loads(request.content)
            self.bodies.append(body)
            product_id = self.next_id
            self.next_id += 1
            return httpx.Response(201, json=self._store(product_id, body))

        match = re.fullmatch(r"/products/(\d+)/(\w+/)?", path)
        if match is None or int(match.group(1)) not in self.products:
            return httpx.Response(404, json={"detail": "Not found."})
        product = self.products[int(match.group(1))]
        action = match.group(2)

        if action is None and method == "GET":
            return httpx.Response(200, json=product)
        if action is None and method == "PATCH":
            body = json.loads(request.content)
            self.bodies.append(body)
            return httpx.Response(200, json=self._store(product["id"], body))
        if action == "images/" and method == "POST":
            names = re.findall(rb'name="images"; filename="([^"]+)"', request.content)
            self.uploaded.append([n.decode() for n in names])
            created = [self._media(f"https://cdn.test/{n.decode()}") for n in names]
            product["media"].extend(created)
            return httpx.Response(201, json=created)
        if action == "brochure/" and method == "POST":
            product["brochure"] = f"https://cdn.test/brochures/{product['id']}.pdf"
            return httpx.Response(200, json={"brochure": product["brochure"]})
        if action == "brochure/" and method == "DELETE":
            product["brochure"] = None
            return httpx.Response(204)
        if action == "media/" and method == "DELETE":
            ids = set(json.loads(request.content)["media_ids"])
            product["media"] = [m for m in product["media"] if m["id"] not in ids]
            return httpx.Response(204)
        return httpx.Response(405, json={"detail": f"Method \"{method}\" not allowed."})

    def _store(self, product_id: int, body: dict) -> dict:
        record = self.products.get(product_id) or {"id": product_id, "media": [], "brochure": None}
        for key, value in body.items():
            if key == "videos":
                known = {m["image"] for m in record["media"]}
                record["media"].extend(self._media(link) for link in value if link not in known)
            else:
                record[key] = value
        self.products[product_id] = record
        return record

    def _media(self, url: str) -> dict:
        self.next_media_id += 1
        return {"id": self.next_media_id, "image": url}


# ===================== fixtures =====================

@pytest.fixture
def categories() -> list[Category]:
    return [Category.model_validate(c) for c in CATEGORY_TREE]


@pytest.fixture
def directory(categories) -> CategoryDirectory:
    return CategoryDirectory(categories)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend) -> MarketplaceClient:
    return MarketplaceClient(API_URL, backend.access_token, "refresh-token", transport=backend.transport)


def make_image(name: str = "photo.jpg", size: int = 200 * KB, content_type: str = "image/jpeg") -> StagedFile:
    return StagedFile(filename=name, content=b"\xff" * size, content_type=content_type)


def make_pdf(name: str = "brochure.pdf", content_type: str = "application/pdf") -> StagedFile:
    return StagedFile(filename=name, content=b"%PDF-1.4 test", content_type=content_type)
