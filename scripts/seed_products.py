"""
Load a week's store offers into the product catalog.

Usage:
    python scripts/seed_products.py offers.csv [--start 2026-10-19]

The CSV needs the columns name, price, store and optionally unit and category.
Without a file the sample offers below are loaded.
"""

import argparse
import io
from datetime import date, timedelta

import pandas as pd
from dotenv import load_dotenv

from config import LOG_LEVEL
from database import DBManager, week_start
from logger import setup_logger
from models import Product

# --- SAMPLE DATA ---
SAMPLE_OFFERS = """name,price,unit,store,category
Kycklingfilé,89.90,kg,ICA,kött
Nötfärs 12%,59.00,kg,ICA,kött
Laxfilé,129.00,kg,Coop,fisk
Torskfilé fryst,69.90,st,Willys,fisk
Potatis,12.90,kg,Willys,grönsaker
Gul lök,9.90,kg,Coop,grönsaker
Krossade tomater,8.50,st,City Gross,skafferi
Pasta penne,14.90,st,ICA,skafferi
Jasminris,24.90,st,Coop,skafferi
Matlagningsgrädde,15.90,st,Willys,mejeri
Ägg 12-pack,39.90,st,City Gross,mejeri
Broccoli,19.90,st,ICA,grönsaker
"""


def load_offers(source) -> list:
    df = pd.read_csv(source)
    missing = {"name", "price", "store"} - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {', '.join(sorted(missing))}")
    df = df.dropna(subset=["name"])
    df["price"] = pd.to_numeric(df["price"], errors="coerce").fillna(0)
    if "unit" not in df.columns:
        df["unit"] = "st"
    if "category" not in df.columns:
        df["category"] = "övrigt"
    df = df.fillna({"unit": "st", "category": "övrigt"})
    return [
        Product(name=r.name, price=r.price, unit=r.unit, store=r.store, category=r.category)
        for r in df.itertuples(index=False)
    ]


def main():
    load_dotenv()
    setup_logger(level=LOG_LEVEL)

    parser = argparse.ArgumentParser(description="Import weekly offers into the product catalog")
    parser.add_argument("csv", nargs="?", help="CSV file with offers")
    parser.add_argument("--start", type=date.fromisoformat, default=date.today(), help="Any day of the offer week")
    args = parser.parse_args()

    products = load_offers(args.csv or io.StringIO(SAMPLE_OFFERS))
    start = week_start(args.start)

    db = DBManager()
    week_id = db.create_week(start, start + timedelta(days=6))
    count = db.save_products(week_id, products)
    db.close()

    print(f"✅ Imported {count} products for the week of {start.isoformat()}.")


if __name__ == "__main__":
    main()
