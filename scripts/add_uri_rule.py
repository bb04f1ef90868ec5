import argparse
import logging

from feedguard.rules import add_uri_rule

logger = logging.getLogger("feedguard")
logging.basicConfig(level=logging.INFO)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Add or replace a feed block rule.")
    parser.add_argument("--prefix", type=str, required=True, help="Firewall rule group name")
    parser.add_argument("--uri", type=str, required=True, help="Feed location, a file path or http(s) URL")
    parser.add_argument("--interval", type=float, default=3600, help="Seconds between feed checks")
    parser.add_argument("--file", type=str, default="config/uri_rules.json", help="Path to the feed rules file")

    args = parser.parse_args()

    new_rule = {
        "rule_prefix": args.prefix,
        "uri": args.uri,
        "interval_seconds": args.interval
    }

    try:
        add_uri_rule(new_rule, args.file)
    except ValueError as e:
        logger.error(f"Rule not added: {str(e)}")
        raise SystemExit(1)
