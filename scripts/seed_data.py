import argparse

from app.core.logging import setup_logging
from app.database import Base, SessionLocal, engine
from app.models import import_all_models
from app.services.seed_service import (
    clear_catalog,
    seed_reference_data,
    seed_sample_products,
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed the reference catalog.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all products and reference rows before seeding.",
    )
    parser.add_argument(
        "--with-samples",
        action="store_true",
        help="Also add a handful of demo products.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.reset:
            clear_catalog(db)

        if seed_reference_data(db):
            print("Reference data created.")
        else:
            print("Seed skipped: product types already exist.")

        if args.with_samples:
            created = seed_sample_products(db)
            print("Sample products created: {}".format(created))
    finally:
        db.close()


if __name__ == "__main__":
    main()
