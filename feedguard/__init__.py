"""Keep firewall block rules in sync with published IP address feeds."""

from feedguard.firewall import Firewall, MemoryFirewall
from feedguard.uri_rule import UriFirewallRule
from feedguard.utils import IPAddressRange, try_parse_range

__all__ = [
    "Firewall",
    "IPAddressRange",
    "MemoryFirewall",
    "UriFirewallRule",
    "try_parse_range",
]

__version__ = "0.1.0"
