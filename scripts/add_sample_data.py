#!/usr/bin/env python3
"""
Скрипт для заполнения каталога тестовыми данными.

Создает категории, подкатегории и товары испытательного оборудования.
Повторный запуск не дублирует записи: существующие slug пропускаются.
"""

import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

# Добавляем путь к пакету storefront
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.catalog.slugs import slugify
from storefront.db.database import SessionLocal, engine
from storefront.db.models import Base, Category, Product, SubCategory

SAMPLE_DESCRIPTION = """
<h3>Product Overview</h3>
<p>High-quality testing equipment designed for professional use in testing laboratories.</p>
<h4>Key Features:</h4>
<ul>
<li>Precision testing capabilities</li>
<li>Durable construction</li>
<li>Accurate measurements</li>
</ul>
"""

SAMPLE_SPECS = [
    "Voltage: 220V/110V, 50/60Hz",
    "Power Consumption: 500W",
    "Accuracy: ±0.1%",
    "Dimensions: 500x400x300mm",
    "Weight: 25kg",
]

CATALOG = {
    "Paper Testing Equipment": {
        "description": "Instruments for paper and board quality control",
        "subcategories": {
            "Cobb Tester": [("Cobb Sizing Tester", "45,000", 4.5)],
            "Bursting Strength Tester": [
                ("Digital Bursting Strength Tester", "1,20,000", 5),
                ("Analog Bursting Strength Tester", "65,000", 4),
            ],
        },
    },
    "Textile Testing Equipment": {
        "description": "Fabric, yarn and fibre testing instruments",
        "subcategories": {
            "Crock Meter": [("Motorised Crock Meter", "38,500", 4.2)],
            "Tensile Tester": [("Universal Tensile Tester", "2,10,000", 4.8)],
        },
    },
    "Packaging Testing Equipment": {
        "description": "Drop, compression and seal testing",
        "subcategories": {
            "Box Compression Tester": [("Box Compression Tester 500kg", "95,000", 4.6)],
        },
    },
}


def add_sample_data(db) -> int:
    """Добавить тестовые данные; возвращает число созданных товаров."""
    created = 0
    now = datetime.utcnow()

    existing_products = set(db.scalars(select(Product.slug)).all())
    for category_title, info in CATALOG.items():
        category = db.scalars(select(Category).where(Category.title == category_title)).first()
        if category is None:
            category = Category(
                title=category_title,
                slug=slugify(category_title),
                description=info["description"],
            )
            db.add(category)
            db.flush()
            print(f"📁 Категория: {category_title}")

        for sub_title, products in info["subcategories"].items():
            sub_slug = slugify(sub_title)
            if db.scalars(select(SubCategory).where(SubCategory.slug == sub_slug)).first() is None:
                db.add(
                    SubCategory(
                        title=sub_title,
                        slug=sub_slug,
                        category=category_title,
                        parent_category_id=category.id,
                    )
                )
                print(f"  📂 Подкатегория: {sub_title}")

            for title, price, rating in products:
                slug = slugify(title)
                if slug in existing_products:
                    continue
                db.add(
                    Product(
                        id=uuid.uuid4().hex,
                        title=title,
                        slug=slug,
                        price=price,
                        rating=rating,
                        reviews=int(rating * 10),
                        category=category_title,
                        sub_category=sub_title,
                        description=SAMPLE_DESCRIPTION,
                        specifications=SAMPLE_SPECS,
                        is_featured=rating >= 4.8,
                        is_best_selling=rating >= 4.5,
                        created_at=now - timedelta(days=created),
                    )
                )
                existing_products.add(slug)
                created += 1
                print(f"    📦 Товар: {title} ({price})")

    db.commit()
    return created


def main() -> int:
    print("🌱 Заполнение каталога тестовыми данными...")
    print("=" * 50)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = add_sample_data(db)
    except SQLAlchemyError as e:
        db.rollback()
        print(f"❌ Ошибка: {e}")
        return 1
    finally:
        db.close()

    print(f"✅ Создано товаров: {created}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
