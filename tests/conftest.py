"""
Общие фикстуры тестов: SQLite в памяти вместо PostgreSQL, локальное
хранилище во временной папке, токен администратора.
"""

import os
import tempfile
from datetime import datetime, timedelta

# Настройки должны быть заданы до первого импорта storefront
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_TYPE"] = "local"
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="storefront-test-")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.db.database import get_db
from storefront.db.models import Base, Category, Product, SubCategory
from storefront.main import app
from storefront.services.catalog_service import snapshot_registry

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    snapshot_registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    snapshot_registry.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/v1/admin/auth/login",
        json={"username": "admin", "password": "admin123"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sample_catalog(db):
    """
    Две категории, три подкатегории и шесть товаров.

    Товары созданы с шагом в день: p1 самый новый.
    """
    now = datetime(2024, 5, 1, 12, 0, 0)
    paper = Category(title="Paper Testing Equipment", slug="paper-testing-equipment")
    textile = Category(title="Textile Testing Equipment", slug="textile-testing-equipment")
    db.add_all([paper, textile])
    db.flush()

    db.add_all([
        SubCategory(title="Cobb Tester", slug="cobb-tester", category=paper.title, parent_category_id=paper.id),
        SubCategory(title="Bursting Strength Tester", slug="bursting-strength-tester",
                    category=paper.title, parent_category_id=paper.id),
        SubCategory(title="Crock Meter", slug="crock-meter", category=textile.title, parent_category_id=textile.id),
    ])

    rows = [
        ("p1", "Cobb Sizing Tester", paper.title, "Cobb Tester", "45,000", 4.5, True, False),
        ("p2", "Digital Bursting Tester", paper.title, "Bursting Strength Tester", "1,20,000", 5, False, True),
        ("p3", "Analog Bursting Tester", paper.title, "Bursting Strength Tester", "65000", 3, False, False),
        ("p4", "Motorised Crock Meter", textile.title, "Crock Meter", "38,500", 4, True, True),
        ("p5", "Tensile Tester", textile.title, None, None, 2, False, False),
        ("p6", "Paper Thickness Gauge", paper.title, None, "abc", 0, False, False),
    ]
    for day, (pid, title, category, sub, price, rating, featured, best) in enumerate(rows):
        db.add(
            Product(
                id=pid,
                title=title,
                slug=title.lower().replace(" ", "-"),
                category=category,
                sub_category=sub,
                price=price,
                rating=rating,
                reviews=day,
                is_featured=featured,
                is_best_selling=best,
                image=f"/static/products/{pid}.jpg" if pid != "p5" else None,
                created_at=now - timedelta(days=day),
            )
        )
    db.commit()
    return db
