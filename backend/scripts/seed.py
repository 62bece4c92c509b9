"""CLI script to reset the campus database to generated demo data.
Usage: python scripts/seed.py [--seed N] [--lecturers N] [--students N]
"""
import sys
import argparse
import logging
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `campus` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from campus.config import settings
from campus.database import engine, create_db_and_tables
from campus.seed import SEED_PASSWORD, SeedService


def main(seed: Optional[int] = None, lecturers: int = 10, students: int = 20):
    """Create the tables if needed, wipe them and seed demo data.

    Counts are printed to stdout; every seeded profile can sign in with
    the shared demo password.
    """
    logging.basicConfig(level=settings.LOG_LEVEL)
    create_db_and_tables()
    with Session(engine) as session:
        counts = SeedService(session, seed=seed, lecturers=lecturers, students=students).seed()
    for name, count in counts.items():
        print(f'Created {count} {name}')
    print(f"Seeded profiles use the password '{SEED_PASSWORD}'")


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--seed', type=int, help='Random seed for reproducible data')
    parser.add_argument('--lecturers', type=int, default=10, help='Number of lecturers to create')
    parser.add_argument('--students', type=int, default=20, help='Number of students to create')
    args = parser.parse_args()
    main(seed=args.seed, lecturers=args.lecturers, students=args.students)
