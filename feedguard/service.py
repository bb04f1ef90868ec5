import argparse
import asyncio
import contextlib
import logging

import requests

from feedguard.firewall import MemoryFirewall
from feedguard.log_handler import setup_logger
from feedguard.rules import build_updaters, load_uri_rules

logger = logging.getLogger("feedguard")

DEFAULT_CYCLE_SECONDS = 15


async def run_cycle(updaters, now=None):
    """
    Give every updater one chance to fetch and apply its feed.
    A failing feed is logged and retried when it is next due.
    Returns:
        The number of updaters that applied a new feed.
    """
    applied = 0
    for updater in updaters:
        try:
            if await updater.update(now):
                applied += 1
        # RequestException subclasses OSError, so it is caught first
        except requests.RequestException as e:
            logger.error(f"Failed to fetch feed {updater.uri} for rule {updater.rule_prefix}: {str(e)}")
        except OSError as e:
            logger.error(f"Failed to read feed {updater.uri} for rule {updater.rule_prefix}: {str(e)}")
        except Exception as e:
            logger.error(f"Failed to update rule {updater.rule_prefix}: {str(e)}")
    return applied


async def run_forever(updaters, cycle_seconds=DEFAULT_CYCLE_SECONDS, max_cycles=None):
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        await run_cycle(updaters)
        cycles += 1
        if max_cycles is None or cycles < max_cycles:
            await asyncio.sleep(cycle_seconds)
    return cycles


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Keep firewall rules in sync with IP address feeds.")
    parser.add_argument("--config", type=str, default="config/uri_rules.json", help="Path to the feed rules file")
    parser.add_argument("--logging-config", type=str, default="config/logging.conf",
                        help="Path to the logging configuration file")
    parser.add_argument("--cycle", type=float, default=DEFAULT_CYCLE_SECONDS,
                        help="Seconds between update cycles")
    parser.add_argument("--once", action="store_true", help="Run a single update cycle and exit")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main function to load feed rules and keep the firewall updated.
    """
    args = parse_args(argv)
    setup_logger(args.logging_config)

    firewall = MemoryFirewall()
    rules = load_uri_rules(args.config)
    with contextlib.ExitStack() as stack:
        updaters = [stack.enter_context(u) for u in build_updaters(firewall, rules)]
        if not updaters:
            logger.warning(f"No usable feed rules in {args.config}")
            return 1
        logger.info(f"Feed updater is running with {len(updaters)} rules...")
        try:
            asyncio.run(run_forever(updaters, args.cycle, 1 if args.once else None))
        except KeyboardInterrupt:
            logger.info("Feed updater stopped by user.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
