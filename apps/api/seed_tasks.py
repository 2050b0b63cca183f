#!/usr/bin/env python
"""
Create fixture tasks for trying out workload optimization.
"""

import argparse
import logging
import sys

from sqlmodel import Session

from lvlai_api.common.error_handlers import ServiceError
from lvlai_api.database import db
from lvlai_api.seed import due_date_distribution, seed_tasks


def main():
    parser = argparse.ArgumentParser(
        description="LVL.AI fixture task generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python seed_tasks.py cluttered --user-id <uuid> --clear   # Unbalanced week
  python seed_tasks.py random --user-id <uuid> --count 20   # Random tasks
        """,
    )
    parser.add_argument(
        "kind", choices=["cluttered", "random"], help="Task set to create"
    )
    parser.add_argument("--user-id", required=True, help="Owner of the new tasks")
    parser.add_argument(
        "--count", type=int, default=15, help="Number of random tasks (default: 15)"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete the user's pending/in-progress tasks first",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    with Session(db.get_engine()) as session:
        try:
            tasks = seed_tasks(
                session, args.user_id, args.kind, count=args.count, clear=args.clear
            )
        except ServiceError as e:
            print(f"❌ {e.message}")
            sys.exit(1)

        print(f"\n✅ Created {len(tasks)} tasks")
        print("\nTask distribution:")
        for day, count in sorted(due_date_distribution(tasks).items()):
            print(f"  {day}: {count} tasks")


if __name__ == "__main__":
    main()
