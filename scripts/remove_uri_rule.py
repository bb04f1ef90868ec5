import argparse
import logging

from feedguard.rules import remove_uri_rule

logging.basicConfig(level=logging.INFO)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Remove a feed block rule.")
    parser.add_argument("--prefix", type=str, required=True, help="Firewall rule group name to remove")
    parser.add_argument("--file", type=str, default="config/uri_rules.json", help="Path to the feed rules file")

    args = parser.parse_args()
    if not remove_uri_rule(args.prefix, args.file):
        raise SystemExit(1)
