import ipaddress
import logging
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger("feedguard")


@dataclass(frozen=True)
class IPAddressRange:
    """
    A contiguous block of IP addresses, from begin to end inclusive.
    A single address is a range whose begin and end are equal.
    """
    begin: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
    end: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

    @property
    def version(self):
        return self.begin.version

    def contains(self, ip_address):
        """
        Check whether an address falls inside the range.
        Args:
            ip_address: An ipaddress address object or its string form.
        Returns:
            True if the address is inside the range, False otherwise.
        """
        if isinstance(ip_address, str):
            ip_address = ipaddress.ip_address(ip_address)
        if ip_address.version != self.version:
            return False
        return self.begin <= ip_address <= self.end

    def __str__(self):
        if self.begin == self.end:
            return str(self.begin)
        networks = list(ipaddress.summarize_address_range(self.begin, self.end))
        if len(networks) == 1:
            return str(networks[0])
        return f"{self.begin}-{self.end}"


def _parse_dash_range(text):
    first, last = (part.strip() for part in text.split("-", 1))
    begin = ipaddress.ip_address(first)
    if begin.version == 4 and last.isdigit():
        # Short form, 10.0.0.1-9 means 10.0.0.1-10.0.0.9
        last = ".".join(first.split(".")[:3] + [last])
    end = ipaddress.ip_address(last)
    if begin.version != end.version or begin > end:
        raise ValueError(f"Invalid address range: {text}")
    return IPAddressRange(begin, end)


def try_parse_range(text):
    """
    Parse a single address, CIDR block, netmask block or dash range.
    Args:
        text: Text such as "10.0.0.1", "10.0.0.0/8", "10.0.0.0/255.0.0.0",
            "10.0.0.1-10.0.0.9" or "10.0.0.1-9".
    Returns:
        An IPAddressRange, or None if the text is not a valid range.
    """
    if not text:
        return None
    text = text.strip()
    try:
        if "-" in text:
            return _parse_dash_range(text)
        if "/" in text:
            network = ipaddress.ip_network(text, strict=False)
            return IPAddressRange(network.network_address, network.broadcast_address)
        address = ipaddress.ip_address(text)
        return IPAddressRange(address, address)
    except ValueError:
        return None


def validate_ip(ip_address):
    """
    Validate an IP address.
    Args:
        ip_address: The IP address to be validated.
    Returns:
        True if the IP address is valid, False otherwise.
    """
    try:
        ipaddress.ip_address(ip_address)
        return True
    except ValueError:
        logger.warning(f"Invalid IP address: {ip_address}")
        return False
