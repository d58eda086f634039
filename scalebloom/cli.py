"""scalebloom command-line driver.

Builds a Scalable Bloom Filter from a JSON configuration file (or the
built-in defaults), adds a list of items and reports membership for another.

Usage: scalebloom [--config config.json | --defaults] [--add ITEM ...] [--check ITEM ...]
"""
import argparse
import json
import logging
import sys

from scalebloom.config import DEFAULT_CONFIG, ConfigError, load_config
from scalebloom.pybloom import ScalableBloomFilter

logger = logging.getLogger(__name__)

DEFAULT_ADD = ["apple", "banana", "cherry", "date", "elderberry", "fig", "grape"]
DEFAULT_CHECK = ["apple", "banana", "cherry", "date", "kiwi", "lemon"]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="scalebloom",
        description="Add items to a Scalable Bloom Filter and test membership.",
    )
    parser.add_argument(
        "--config", default="config.json",
        help="Path to configuration file (default: config.json)",
    )
    parser.add_argument(
        "--defaults", action="store_true",
        help="Use the built-in default configuration instead of --config.",
    )
    parser.add_argument(
        "--saturation", choices=[ScalableBloomFilter.CAPACITY, ScalableBloomFilter.COLLISION],
        default=ScalableBloomFilter.CAPACITY,
        help="When to start a new internal filter (default: capacity)",
    )
    parser.add_argument(
        "--add", nargs="*", default=DEFAULT_ADD, metavar="ITEM",
        help="Items to add (default: a short list of fruit)",
    )
    parser.add_argument(
        "--check", nargs="*", default=DEFAULT_CHECK, metavar="ITEM",
        help="Items to test for membership",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log filter growth at DEBUG level.",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.defaults:
        config = DEFAULT_CONFIG
    else:
        try:
            config = load_config(args.config)
        except FileNotFoundError:
            print(f"Configuration file not found: {args.config}", file=sys.stderr)
            return 1
        except (json.JSONDecodeError, ConfigError) as exc:
            print(f"Error loading configuration: {exc}", file=sys.stderr)
            return 1

    try:
        sbf = ScalableBloomFilter.from_config(config, saturation=args.saturation)
    except ConfigError as exc:
        print(f"Error initializing Scalable Bloom Filter: {exc}", file=sys.stderr)
        return 1

    for item in args.add:
        sbf.add(item)
    logger.info("Added %d items across %d filters", len(args.add), len(sbf.filters))

    for item in args.check:
        print(f"Contains '{item}': {item in sbf}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
