import abc
import ipaddress
import logging
from dataclasses import dataclass, field

from feedguard.utils import validate_ip

logger = logging.getLogger("feedguard")


class Firewall(abc.ABC):
    """Block-list operations a rule source needs from a firewall."""

    @abc.abstractmethod
    async def block_ip_addresses(self, rule_prefix, ranges, allowed_ranges=None):
        """
        Replace every block entry of a rule group with a new set of ranges.
        Args:
            rule_prefix: Name of the rule group to replace.
            ranges: Ordered sequence of IPAddressRange objects to block.
            allowed_ranges: Optional ranges to explicitly allow in the group.
        """


@dataclass
class FirewallRule:
    blocked: list = field(default_factory=list)
    allowed: list = field(default_factory=list)


class MemoryFirewall(Firewall):
    """Firewall that keeps its rule groups in process memory."""

    def __init__(self):
        self.rules = {}

    async def block_ip_addresses(self, rule_prefix, ranges, allowed_ranges=None):
        rule = FirewallRule(list(ranges), list(allowed_ranges or []))
        self.rules[rule_prefix] = rule
        logger.info(f"Rule {rule_prefix} now blocks {len(rule.blocked)} ranges "
                    f"and allows {len(rule.allowed)} ranges")

    def get_rule(self, rule_prefix):
        return self.rules.get(rule_prefix, FirewallRule())

    def is_blocked(self, ip_address):
        """
        Check if an IP address is blocked by any rule group.
        Args:
            ip_address: The IP address to check.
        Returns:
            True if a rule blocks the address and the same rule does not allow it.
        """
        if not validate_ip(ip_address):
            return False
        address = ipaddress.ip_address(ip_address)

        for rule_prefix, rule in self.rules.items():
            if any(r.contains(address) for r in rule.allowed):
                continue
            if any(r.contains(address) for r in rule.blocked):
                logger.warning(f"IP address {ip_address} blocked by rule {rule_prefix}")
                return True
        return False
