"""
DineFlow - Database Initialization
===================================
Creates any missing tables and prints each table with its row count.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --drop         # Drop and recreate (asks first)
    python scripts/init_db.py --drop --yes   # ...without asking
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect, select, func  # noqa: E402

from config.database import Base, engine  # noqa: E402
from modules.user.models import User  # noqa: F401, E402
from modules.catalog.models import MenuCategory, FoodItem  # noqa: F401, E402
from modules.cart.models import Cart, CartItem  # noqa: F401, E402
from modules.order.models import Order, OrderItem, OrderStatusLog  # noqa: F401, E402


def confirm_drop() -> bool:
    answer = input(f"Drop ALL tables on {engine.url.render_as_string(hide_password=True)}? Type 'yes': ")
    return answer.strip().lower() == "yes"


def report():
    existing = set(inspect(engine).get_table_names())
    print(f"\nTables ({len(existing)}):")
    with engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            if table.name not in existing:
                print(f"  ! {table.name:<20} missing")
                continue
            rows = conn.execute(select(func.count()).select_from(table)).scalar()
            print(f"  - {table.name:<20} {rows} rows")


def init_db(drop_first: bool = False):
    if drop_first:
        Base.metadata.drop_all(bind=engine)
        print("Dropped all tables.")
    Base.metadata.create_all(bind=engine)
    report()


if __name__ == "__main__":
    drop = "--drop" in sys.argv
    if drop and "--yes" not in sys.argv and not confirm_drop():
        print("Aborted.")
        sys.exit(0)
    init_db(drop_first=drop)
