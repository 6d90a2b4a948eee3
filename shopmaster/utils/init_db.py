"""
Database initialization script
Creates all tables and optionally seeds with demo or fake data
"""
import argparse

from loguru import logger

from shopmaster.config import get_settings
from shopmaster.seed import DataGenerator, seed_demo_data
from shopmaster.storage import SqlStorage
from shopmaster.utils.database import SessionLocal, create_tables, drop_tables


def init_database():
    """Initialize the database by creating all tables"""
    logger.info("Creating database tables...")
    create_tables()
    logger.info("Database tables created successfully!")


def reset_database():
    """Reset the database by dropping and recreating all tables"""
    logger.info("Dropping existing tables...")
    drop_tables()
    logger.info("Creating new tables...")
    create_tables()
    logger.info("Database reset successfully!")


def seed_database(fake_products: int = 0):
    db = SessionLocal()
    try:
        storage = SqlStorage(db)
        if not seed_demo_data(storage, get_settings()):
            logger.info("Catalog already populated, demo data skipped")
        if fake_products:
            DataGenerator(storage).generate_all(products=fake_products)
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Database management script")
    parser.add_argument("--init", action="store_true", help="Initialize database")
    parser.add_argument("--reset", action="store_true", help="Reset database")
    parser.add_argument("--seed", action="store_true", help="Insert demo catalog, coupon and admin user")
    parser.add_argument("--fake", type=int, default=0, metavar="N", help="Generate N random products with Faker")

    args = parser.parse_args(argv)

    if args.reset:
        reset_database()
    elif args.init or args.seed or args.fake:
        init_database()
    else:
        parser.print_help()
        return

    if args.seed or args.fake:
        seed_database(fake_products=args.fake)


if __name__ == "__main__":
    main()
