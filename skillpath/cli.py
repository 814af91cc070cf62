#!/usr/bin/env python3
"""
skillpath - Command line access to progress, rewards and the shop.

Usage:
  skillpath --user ana@example.com tree maths
  skillpath --user ana@example.com complete maths FRA-101-L1
  skillpath --user ana@example.com profile
  skillpath add-item --id streak_freeze --name "Streak Freeze" --price 10 --max 2
  skillpath --user ana@example.com buy streak_freeze
  skillpath --user ana@example.com leaderboard --weekly

The user can also be given through SKILLPATH_USER.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from skillpath.classroom import LearningService, StaticAuth
from skillpath.config import load_settings
from skillpath.errors import SkillPathError
from skillpath.schemas import BoostInfo, LeaderboardPeriod, ShopItem

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    "completed": "✓",
    "available": "○",
    "locked": "◌",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skillpath", description=__doc__.split("\n\n")[0])
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--db", type=Path, help="SQLite database path")
    parser.add_argument("--content-dir", type=Path, help="Content directory")
    parser.add_argument("--user", default=os.environ.get("SKILLPATH_USER"), help="Current user id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database tables")

    tree = sub.add_parser("tree", help="Show the topic tree with node states")
    tree.add_argument("topic")

    lesson = sub.add_parser("lesson", help="Show a lesson's questions")
    lesson.add_argument("topic")
    lesson.add_argument("lesson_id")

    complete = sub.add_parser("complete", help="Record a lesson completion and award rewards")
    complete.add_argument("topic")
    complete.add_argument("lesson_id")

    sub.add_parser("profile", help="Show XP, level and gems")
    sub.add_parser("shop", help="List shop items")

    add_item = sub.add_parser("add-item", help="Add or update a shop item")
    add_item.add_argument("--id", required=True)
    add_item.add_argument("--name", required=True)
    add_item.add_argument("--price", type=int, required=True)
    add_item.add_argument("--description", default="")
    add_item.add_argument("--type", dest="item_type", default="item")
    add_item.add_argument("--max", dest="max_inventory", type=int)
    add_item.add_argument("--sort-order", type=int, default=0)
    add_item.add_argument("--multiplier", type=float, help="Boost XP multiplier")
    add_item.add_argument("--duration", type=int, help="Boost duration in minutes")

    buy = sub.add_parser("buy", help="Purchase a shop item")
    buy.add_argument("item_id")

    sub.add_parser("inventory", help="List owned items and active boosts")

    board = sub.add_parser("leaderboard", help="Show rankings")
    board.add_argument("--weekly", action="store_true")
    board.add_argument("--limit", type=int)

    return parser


def _print_tree(service: LearningService, topic_name: str):
    summary = service.progress_summary(topic_name)
    print(f"{summary['topic']}: {summary['completed_nodes']}/{summary['total_nodes']} nodes "
          f"({summary['completion_percent']}%)")
    for unit in service.navigation(topic_name):
        print(f"\n[{unit.section_name}] {unit.unit_name} ({unit.completed_count}/{unit.total_count})")
        for nav in unit.nodes:
            icon = STATUS_ICONS[nav.state.label]
            line = f"  {icon} {nav.node.id} {nav.node.title} ({nav.completed_lessons}/{nav.total_lessons} lessons)"
            if nav.missing_requirements:
                line += f" requires: {', '.join(nav.missing_requirements)}"
            print(line)


def _print_lesson(service: LearningService, topic_name: str, lesson_id: str):
    lesson = service.lesson(lesson_id, topic_name)
    print(f"{lesson.lesson_id}: {len(lesson.questions)} questions")
    for i, question in enumerate(lesson.questions, 1):
        print(f"  {i}. [{question.type}] {question.question}")


def _run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    overrides = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.content_dir:
        overrides["content_dir"] = args.content_dir
    if overrides:
        settings = settings.model_copy(update=overrides)

    service = LearningService(settings, StaticAuth(args.user))

    if args.command == "init-db":
        print(f"Database ready: {settings.db_path}")
    elif args.command == "tree":
        _print_tree(service, args.topic)
    elif args.command == "lesson":
        _print_lesson(service, args.topic, args.lesson_id)
    elif args.command == "complete":
        outcome = service.complete_lesson(args.lesson_id, args.topic)
        result = outcome.completion
        if result.already_completed:
            print(f"{args.lesson_id} already completed")
        else:
            print(f"+{result.xp_awarded} XP, +{result.gems_awarded} gems "
                  f"(level {result.new_level}, {result.new_xp} XP)")
            if result.leveled_up:
                print(f"Level up! Now level {result.new_level}")
        if outcome.node_completed:
            print(f"Node {outcome.node_id} completed!")
    elif args.command == "profile":
        profile = service.profile()
        balance = service.balance()
        print(f"{profile.display_name}: level {profile.current_level}, "
              f"{profile.current_xp}/{profile.current_level * settings.level_xp_step} XP")
        print(f"Total XP: {profile.total_xp_earned}, lessons: {profile.lessons_completed}, "
              f"nodes: {profile.nodes_completed}")
        print(f"Gems: {balance.gems} (earned {balance.total_gems_earned}, spent {balance.total_gems_spent})")
    elif args.command == "shop":
        for item in service.shop():
            line = f"{item.icon_emoji} {item.id}: {item.name} - {item.price_gems} gems".strip()
            if item.boost:
                line += f" ({item.boost.multiplier}x XP for {item.boost.duration_minutes} min)"
            print(line)
    elif args.command == "add-item":
        boost = None
        if args.multiplier is not None or args.duration is not None:
            if args.multiplier is None or args.duration is None:
                print("Boost items need both --multiplier and --duration", file=sys.stderr)
                return 2
            boost = BoostInfo(multiplier=args.multiplier, duration_minutes=args.duration)
        service.catalog.add_item(ShopItem(
            id=args.id,
            name=args.name,
            description=args.description,
            item_type="boost" if boost else args.item_type,
            price_gems=args.price,
            max_inventory=args.max_inventory,
            sort_order=args.sort_order,
            boost=boost,
        ))
        print(f"Saved {args.id}")
    elif args.command == "buy":
        result = service.purchase(args.item_id)
        print(f"Bought {result.item_id} (owned: {result.quantity}), gems left: {result.new_balance}")
        if result.boost_expires_at:
            print(f"Boost active until {result.boost_expires_at.isoformat()}")
    elif args.command == "inventory":
        for entry in service.inventory():
            print(f"{entry.item.id}: {entry.quantity}")
        for boost in service.active_boosts():
            print(f"Active boost {boost.item_id}: {boost.multiplier}x until {boost.expires_at.isoformat()}")
    elif args.command == "leaderboard":
        period = LeaderboardPeriod.WEEKLY if args.weekly else LeaderboardPeriod.ALL_TIME
        for entry in service.leaderboard(period, args.limit):
            print(f"{entry.rank:>3}. {entry.display_name} - {entry.xp} XP (level {entry.current_level})")
        mine = service.my_rank(period)
        if mine:
            print(f"Your rank: {mine.rank}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        return _run(args)
    except SkillPathError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main_entry():
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
