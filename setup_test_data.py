#!/usr/bin/env python3
"""Seed the configured database with a few sample items."""

from inventory_app.database import SessionLocal, Base, engine
from inventory_app.models import Item
from inventory_app.services.item_service import ItemService

SAMPLE_ITEMS = [
    {"name": "White T-Shirt", "total_quantity": 100},
    {"name": "Blue Jeans", "total_quantity": 50},
    {"name": "Red Hoodie", "total_quantity": 25},
    {"name": "Black Sneakers", "total_quantity": 75},
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        item_service = ItemService(db)
        for data in SAMPLE_ITEMS:
            existing = db.query(Item).filter(Item.name == data["name"]).first()
            db.rollback()
            if existing:
                print(f"Item {data['name']} already exists ({existing.id})")
                continue
            item = item_service.create_item(data["name"], data["total_quantity"])
            print(f"Added item {item.name} ({item.id}) with {item.total_quantity} units")
    finally:
        db.close()
    print("Test data setup completed")


if __name__ == "__main__":
    seed()
