import json
import logging
from datetime import timedelta

from feedguard.uri_rule import UriFirewallRule, resolve_uri

logger = logging.getLogger("feedguard")

REQUIRED_KEYS = ("rule_prefix", "uri", "interval_seconds")


def load_uri_rules(file_path):
    """
    Load feed rule definitions from a JSON file.
    Args:
        file_path: Path to the JSON file containing feed rules.
    Returns:
        A list of feed rule dictionaries.
    """
    try:
        with open(file_path, 'r') as rules_file:
            rules = json.load(rules_file)
            logger.info(f"Loaded {len(rules)} feed rules from {file_path}")
            return rules
    except FileNotFoundError:
        logger.warning(f"Rules file not found: {file_path}. Starting with an empty ruleset.")
        return []
    except json.JSONDecodeError:
        logger.error(f"Error decoding rules file: {file_path}")
        return []


def save_uri_rules(rules, file_path):
    """
    Save feed rule definitions to a JSON file.
    Args:
        rules: A list of feed rule dictionaries.
        file_path: Path to the JSON file to save the rules.
    """
    with open(file_path, 'w') as rules_file:
        json.dump(rules, rules_file, indent=4)
        logger.info(f"Saved {len(rules)} feed rules to {file_path}")


def validate_uri_rule(rule):
    """
    Check a feed rule definition, raising ValueError if it is unusable.
    """
    if not isinstance(rule, dict):
        raise ValueError(f"Feed rule must be an object, got {type(rule).__name__}")
    missing = [key for key in REQUIRED_KEYS if key not in rule]
    if missing:
        raise ValueError(f"Feed rule is missing {', '.join(missing)}")
    if not isinstance(rule["rule_prefix"], str) or not rule["rule_prefix"].strip():
        raise ValueError("Feed rule prefix must be a non-empty string")
    interval = rule["interval_seconds"]
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
        raise ValueError(f"Invalid interval for {rule['rule_prefix']}: {interval}")
    if not isinstance(rule["uri"], str) or not rule["uri"].strip():
        raise ValueError(f"Invalid uri for {rule['rule_prefix']}: {rule['uri']}")
    resolve_uri(rule["uri"])


def add_uri_rule(rule, file_path):
    """
    Add a feed rule, replacing any existing rule with the same prefix.
    Args:
        rule: A dictionary representing the feed rule to be added.
        file_path: Path to the JSON file containing feed rules.
    """
    validate_uri_rule(rule)
    rules = [r for r in load_uri_rules(file_path) if r.get("rule_prefix") != rule["rule_prefix"]]
    rules.append(rule)
    save_uri_rules(rules, file_path)


def remove_uri_rule(rule_prefix, file_path):
    """
    Remove a feed rule by its prefix.
    Returns:
        True if a rule was removed.
    """
    rules = load_uri_rules(file_path)
    remaining = [r for r in rules if r.get("rule_prefix") != rule_prefix]
    if len(remaining) == len(rules):
        logger.error(f"No feed rule named {rule_prefix}. No rule removed.")
        return False
    logger.info(f"Removed feed rule {rule_prefix}")
    save_uri_rules(remaining, file_path)
    return True


def build_updaters(firewall, rules):
    """
    Create a UriFirewallRule for every valid rule definition.
    Args:
        firewall: The Firewall the updaters block with.
        rules: A list of feed rule dictionaries.
    Returns:
        A list of UriFirewallRule objects. The caller closes them.
    """
    updaters = []
    for rule in rules:
        try:
            validate_uri_rule(rule)
        except ValueError as e:
            logger.error(f"Skipping feed rule {rule}: {str(e)}")
            continue
        updaters.append(UriFirewallRule(firewall, rule["rule_prefix"], rule["uri"],
                                        timedelta(seconds=rule["interval_seconds"])))
    return updaters
