"""
Maintain board posting requirements. Run from project root:
  python -m app.scripts.board_requirements                 # list
  python -m app.scripts.board_requirements Politics --min-login-count 30
  python -m app.scripts.board_requirements Health --min-reputation 10 --min-level member
  python -m app.scripts.board_requirements Health --delete
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.models import BoardRequirement
from app.services.levels import LEVEL_RANK

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return number


def main() -> int:
    parser = argparse.ArgumentParser(description="List, set or delete board requirements.")
    parser.add_argument("category", nargs="?", help="Board category, e.g. Politics")
    parser.add_argument("--min-login-count", type=_non_negative)
    parser.add_argument("--min-reputation", type=_non_negative)
    parser.add_argument("--min-level", choices=list(LEVEL_RANK))
    parser.add_argument("--delete", action="store_true", help="Remove all requirements of the category")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.category is None:
            for req in db.query(BoardRequirement).order_by(BoardRequirement.board_category):
                print(
                    f"{req.board_category}: min_login_count={req.min_login_count} "
                    f"min_reputation={req.min_reputation} min_level={req.min_level}"
                )
            return 0

        req = db.get(BoardRequirement, args.category)
        if args.delete:
            if req is not None:
                db.delete(req)
                db.commit()
            logger.info("Board requirements removed: category=%s", args.category)
            return 0

        if req is None:
            req = BoardRequirement(board_category=args.category)
            db.add(req)
        req.min_login_count = args.min_login_count
        req.min_reputation = args.min_reputation
        req.min_level = args.min_level
        db.commit()
        logger.info(
            "Board requirements set: category=%s min_login_count=%s min_reputation=%s min_level=%s",
            args.category,
            args.min_login_count,
            args.min_reputation,
            args.min_level,
        )
        return 0
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Updating board requirements failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
