#!/usr/bin/env python3
"""
Print a user's learned preferences from the configured stores.

Shows decayed weights per feature type, current blind spots, and how often
each ignore reason was used. Store selection follows .env (WEIGHT_STORE etc.).

Usage:
  From repo root:
    python -m feedback.scripts.preferences_report --user alice
  Limit the boost/suppression lists and print JSON instead of text:
    python -m feedback.scripts.preferences_report --user alice --limit 5 --json
"""

import argparse
import json
import sys
from typing import List, Optional

from personalization.learning import ignore_reason_stats

from feedback.config import get_config
from feedback.logging_config import setup_logging
from feedback.state import get_state


def _print_section(title: str) -> None:
    print(f"\n{title}\n{'-' * len(title)}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Report a user's learned preferences")
    parser.add_argument("--user", required=True, help="User id")
    parser.add_argument("--limit", type=int, default=10, help="Max boosts/suppressions to list")
    parser.add_argument("--json", action="store_true", help="Print one JSON document")
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging(config.log_level, "text")
    state = get_state()

    summary = state.preferences.summary(args.user, limit=args.limit)
    alerts = state.ranking.detect_blind_spots(args.user)
    stats = ignore_reason_stats(state.ignore_log.list_records(args.user))

    if args.json:
        print(
            json.dumps(
                {
                    "user_id": args.user,
                    "preferences": summary.model_dump(mode="json"),
                    "blind_spots": [a.model_dump(mode="json") for a in alerts],
                    "ignore_reasons": [s.model_dump(mode="json") for s in stats],
                },
                indent=2,
            )
        )
        return 0

    print(f"Preferences for {args.user} ({summary.total} features)")
    for feature_type, entries in summary.by_type.items():
        _print_section(feature_type)
        for e in entries:
            muted = " [muted]" if e.state.value == "muted" else ""
            print(f"  {e.display:>14}  {e.feature_value}{muted}")

    _print_section("Blind spots")
    if not alerts:
        print("  none")
    for a in alerts:
        print(f"  {a.feature_key} ({a.weight:+.1f}): {a.message}")

    _print_section("Ignore reasons")
    if not stats:
        print("  none")
    for s in stats:
        print(f"  {s.reason_type.value:<14} {s.count:>4}  {s.percentage:5.1f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
