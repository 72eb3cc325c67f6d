"""
Demo data seeder
Usage: python seed_demo.py [--subdomain vetgroom1] [--with-routes]
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from vetgroom.database import Base, SessionLocal, engine
from vetgroom.domain.delivery.seed import seed_delivery_routes
from vetgroom.seeds import seed_demo_data

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main(subdomain: str, with_routes: bool):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        tenant = seed_demo_data(db, subdomain)
        logger.info(f"Tenant '{tenant.name}' ready (id={tenant.id}, subdomain={tenant.subdomain})")
        if with_routes:
            result = seed_delivery_routes(db, tenant)
            if result["skipped"]:
                logger.info(f"Delivery routes skipped: {result['reason']}")
            else:
                logger.info(f"Created {result['created']} delivery routes")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed VetGroom demo data")
    parser.add_argument("--subdomain", default="vetgroom1")
    parser.add_argument("--with-routes", action="store_true", help="Also seed sample delivery routes")
    args = parser.parse_args()

    try:
        main(args.subdomain, args.with_routes)
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
