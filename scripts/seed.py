"""
DineFlow - Database Seeder
===========================
Seeds an admin, a demo customer and a small menu, then prints bearer
tokens for both users so the API can be tried right away.

Usage:
    python scripts/seed.py          # Seed (skips rows that already exist)
    python scripts/seed.py --reset  # Drop all data and reseed
"""

import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine  # noqa: E402
from common.security import create_token  # noqa: E402
from modules.user.models import User  # noqa: E402
from modules.catalog.models import MenuCategory, FoodItem  # noqa: E402
from modules.cart.models import Cart, CartItem  # noqa: F401, E402
from modules.order.models import Order, OrderItem, OrderStatusLog  # noqa: F401, E402


MENU = {
    "Burgers": [
        ("Classic Burger", "Beef patty, cheddar, pickles", "8.50"),
        ("Veggie Burger", "Black bean patty, avocado", "7.90"),
    ],
    "Pizza": [
        ("Margherita", "Tomato, mozzarella, basil", "11.00"),
        ("Pepperoni", "Tomato, mozzarella, pepperoni", "12.50"),
    ],
    "Drinks": [
        ("Lemonade", "Fresh squeezed", "3.50"),
        ("Iced Tea", "Unsweetened", "2.75"),
    ],
}


def get_or_create_user(db, email: str, **fields) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"  = user {email} exists")
        return user
    user = User(email=email, **fields)
    db.add(user)
    db.flush()
    print(f"  + user {email}")
    return user


def seed_menu(db):
    for sort_order, (category_name, items) in enumerate(MENU.items()):
        category = db.query(MenuCategory).filter(MenuCategory.name == category_name).first()
        if not category:
            category = MenuCategory(name=category_name, sort_order=sort_order)
            db.add(category)
            db.flush()
            print(f"  + category {category_name}")
        for name, description, price in items:
            exists = db.query(FoodItem.id).filter(
                FoodItem.name == name, FoodItem.category_id == category.id,
            ).first()
            if exists:
                continue
            db.add(FoodItem(name=name, description=description, price=Decimal(price), category_id=category.id))
            print(f"    + {name} ({price})")
    db.flush()


def seed(reset: bool = False):
    if reset:
        print("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        print("Users:")
        admin = get_or_create_user(db, "admin@dineflow.local", name="Admin", phone="+15550000001", is_admin=True)
        customer = get_or_create_user(
            db, "guest@dineflow.local",
            name="Demo Customer", phone="+15550000002",
            street="1 Main St", city="Springfield", zip_code="10001",
        )
        print("Menu:")
        seed_menu(db)
        db.commit()

        print("\nBearer tokens:")
        print(f"  admin:    {create_token({'sub': str(admin.id)})}")
        print(f"  customer: {create_token({'sub': str(customer.id)})}")
        print("\nSeed complete.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed(reset="--reset" in sys.argv)
