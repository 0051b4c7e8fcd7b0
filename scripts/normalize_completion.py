"""
CLI helper to run the meal plan normalizer over a saved model response.

Useful for replaying responses that failed in production:

    python scripts/normalize_completion.py response.txt
    cat response.txt | python scripts/normalize_completion.py -
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from grub.models.normalizer import SchemaError, normalize
from grub.shared.json_utils import MalformedResponseError


def main() -> int:
    parser = argparse.ArgumentParser(description="Normalize a raw meal plan completion")
    parser.add_argument(
        "path",
        type=str,
        help="File holding the raw completion text, or - for stdin",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indent for the output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log each repair and dropped entry",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    raw = sys.stdin.read() if args.path == "-" else Path(args.path).read_text()

    try:
        plan_set = normalize(raw)
    except MalformedResponseError as e:
        print(f"Malformed response: {e}", file=sys.stderr)
        return 2
    except SchemaError as e:
        print(f"Unusable response: {e}", file=sys.stderr)
        return 3

    print(json.dumps(plan_set.to_dict(), indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
