from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import get_async_session, get_database
from app.core.exceptions import NotFoundError
from app.main import create_app
from app.models.product import Product, ProductFilter, PaginationParams
from app.services.product_service import ProductService, get_product_service


def copy_product(product: Product) -> Product:
    return Product(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        categories=list(product.categories),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class FakeProductDAO:
    """In-memory stand-in for ProductDAO that records every call it receives."""

    def __init__(self):
        self.rows: Dict[int, Product] = {}
        self.calls: List[str] = []
        self.next_id = 1
        self.clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.fail_with = None

    def _now(self) -> datetime:
        self.clock += timedelta(seconds=1)
        return self.clock

    def _record(self, name: str):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, db, *, obj_in: Dict[str, Any]) -> Product:
        self._record("create")
        now = self._now()
        product = Product(id=self.next_id, created_at=now, updated_at=now, **obj_in)
        self.rows[product.id] = product
        self.next_id += 1
        return copy_product(product)

    async def get_by_id(self, db, id: int) -> Product:
        self._record("get_by_id")
        if id not in self.rows:
            raise NotFoundError("product not found", {"id": id})
        return copy_product(self.rows[id])

    async def list(
        self, db, product_filter: ProductFilter, pagination: PaginationParams
    ) -> Tuple[List[Product], int]:
        self._record("list")
        matches = []
        for product in self.rows.values():
            if product_filter.category and not any(
                product_filter.category.lower() in category.lower() for category in product.categories
            ):
                continue
            if product_filter.min_price is not None and product.price < product_filter.min_price:
                continue
            if product_filter.max_price is not None and product.price > product_filter.max_price:
                continue
            if product_filter.search and not any(
                product_filter.search.lower() in (text or "").lower()
                for text in (product.name, product.description)
            ):
                continue
            matches.append(product)
        matches.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        page = matches[pagination.offset:pagination.offset + pagination.limit]
        return [copy_product(p) for p in page], len(matches)

    async def update(self, db, *, id: int, values: Dict[str, Any]) -> None:
        self._record("update")
        if id not in self.rows:
            raise NotFoundError("product not found", {"id": id})
        product = self.rows[id]
        for field, value in values.items():
            setattr(product, field, value)
        product.updated_at = self._now()

    async def delete(self, db, *, id: int) -> None:
        self._record("delete")
        if self.rows.pop(id, None) is None:
            raise NotFoundError("product not found", {"id": id})


class FakeDatabase:
    def __init__(self):
        self.reachable = True

    async def ping(self) -> None:
        if not self.reachable:
            raise ConnectionRefusedError("connection refused")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        db_host="localhost",
        db_user="catalog",
        db_password="secret",
        db_name="catalog_test",
        auto_create_tables=False,
        _env_file=None,
    )


@pytest.fixture
def product_dao() -> FakeProductDAO:
    return FakeProductDAO()


@pytest.fixture
def service(product_dao) -> ProductService:
    return ProductService(product_dao)


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(settings, service, fake_database):
    app = create_app(settings)

    async def override_session():
        yield None

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_product_service] = lambda: service
    app.dependency_overrides[get_database] = lambda: fake_database
    return TestClient(app)


@pytest.fixture
def seed(client):
    def _seed(name="Widget", price=10, categories=None, description="A product"):
        response = client.post(
            "/products",
            json={
                "name": name,
                "description": description,
                "price": price,
                "categories": categories or ["tools"],
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _seed
