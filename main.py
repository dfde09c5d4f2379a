"""Interview Tracker: resume artifact maintenance CLI

Usage:
    python main.py --reconcile                 (link an artifact for every scheduled interview)
    python main.py --reconcile --regenerate    (re-render every artifact from current content)
    python main.py --fix-links                 (migrate legacy /scheduled-resume links)
    python main.py --inspect INTERVIEW_ID      (show prefix, index entry and candidate files)
    python main.py --prefix 2025-08-21 "Phone Screen" "Acme Corp"
    python main.py --issue-token USER_ID       (sign a development access token)
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("interview-tracker")


def _services():
    from artifacts.generator import ArtifactGenerator
    from artifacts.scheduling import SchedulingService
    from artifacts.store import ArtifactStore
    from records.store import RecordStore
    from web import config

    artifact_config = config.artifact_config()
    records = RecordStore(config.TRACKER_DB)
    store = ArtifactStore(artifact_config.schedule_dir)
    scheduler = SchedulingService(records, store, ArtifactGenerator(artifact_config))
    return records, scheduler


def reconcile(regenerate: bool = False) -> int:
    from artifacts.reconcile import reconcile_all

    records, scheduler = _services()
    summary = reconcile_all(records, scheduler, regenerate=regenerate)
    print(json.dumps(summary, indent=2))
    return 1 if summary["failed"] else 0


def fix_links() -> int:
    from artifacts.reconcile import fix_legacy_links

    records, _ = _services()
    fixed = fix_legacy_links(records)
    logger.info("Updated %d legacy resume links", len(fixed))
    return 0


def inspect(interview_id: str) -> int:
    from artifacts.errors import ArtifactError

    _, scheduler = _services()
    try:
        info = scheduler.describe(interview_id)
    except ArtifactError as e:
        logger.error("Cannot inspect interview %s: %s", interview_id, e.detail)
        return 1
    print(json.dumps(info, indent=2))
    return 0


def show_prefix(meeting_date: str, title: str, company: str) -> int:
    from artifacts.key_codec import build_prefix

    try:
        print(build_prefix(meeting_date, title, company))
    except ValueError as e:
        logger.error("Invalid meeting date %r: %s", meeting_date, e)
        return 1
    return 0


def issue_token(user_id: str) -> int:
    from web import config
    from web.auth import create_access_token

    records, _ = _services()
    user = records.get_user(user_id)
    if user is None:
        logger.error("User not found: %s", user_id)
        return 1
    print(create_access_token(user, config.JWT_SECRET))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Interview Tracker: scheduled resume artifacts")
    parser.add_argument("--reconcile", action="store_true", help="Ensure every scheduled interview has an artifact")
    parser.add_argument("--regenerate", action="store_true", help="With --reconcile: re-render even fresh artifacts")
    parser.add_argument("--fix-links", action="store_true", help="Migrate legacy /scheduled-resume links")
    parser.add_argument("--inspect", metavar="INTERVIEW_ID", help="Show artifact diagnostics for an interview")
    parser.add_argument("--prefix", nargs=3, metavar=("DATE", "TITLE", "COMPANY"), help="Print the artifact prefix")
    parser.add_argument("--issue-token", metavar="USER_ID", help="Sign an access token for a user")
    args = parser.parse_args()

    if args.regenerate and not args.reconcile:
        parser.error("--regenerate requires --reconcile")

    if args.reconcile:
        sys.exit(reconcile(regenerate=args.regenerate))
    if args.fix_links:
        sys.exit(fix_links())
    if args.inspect:
        sys.exit(inspect(args.inspect))
    if args.prefix:
        sys.exit(show_prefix(*args.prefix))
    if args.issue_token:
        sys.exit(issue_token(args.issue_token))
    parser.print_help()


if __name__ == "__main__":
    main()
