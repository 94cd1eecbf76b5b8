"""
Recompute reaction aggregates from the reactions table.
Run this as: python scripts/reconcile_reactions.py [--post-id ID]
"""
import argparse
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("reconcile")

sys.path.append(str(Path(__file__).resolve().parent.parent))

from be4real.db import base  # noqa: F401  registers every model
from be4real.db.session import SessionLocal
from be4real.modules.posts.reactions.services.reconcile import reconcile_reaction_counts

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Rebuild post reaction counts and user reaction totals")
    parser.add_argument("--post-id", help="Only reconcile this post")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        report = reconcile_reaction_counts(db, post_id=args.post_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Reconciliation failed: {e}")
        raise
    finally:
        db.close()

    logger.info(
        f"Checked {report.posts_checked} posts, fixed {report.posts_fixed} posts "
        f"and {report.users_fixed} users"
    )
    return 0

if __name__ == "__main__":
    sys.exit(main())
