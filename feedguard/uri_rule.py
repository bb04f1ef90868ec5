import asyncio
import codecs
import itertools
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from feedguard.utils import try_parse_range

logger = logging.getLogger("feedguard")

# Lines past this point are ignored so a huge or corrupt feed cannot stall us
MAX_FEED_LINES = 10000
COMMENT_PREFIXES = ("#", "'", "REM")
REQUEST_TIMEOUT = 10
# Only CR, LF and CRLF end a line
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class IntervalGate:
    def __init__(self, interval):
        """
        Track when a feed was last fetched.
        Args:
            interval: datetime.timedelta between fetches.
        """
        self.interval = interval
        self.last_run = None

    def should_run(self, now):
        """
        Check whether a fetch is due, and mark it as started if so.
        Args:
            now: The current time.
        Returns:
            True if at least one interval has passed since the last run.
        """
        if self.last_run is not None and now - self.last_run < self.interval:
            return False
        self.last_run = now
        return True


class FileSource:
    kind = "file"

    def __init__(self, path):
        self.path = Path(path)

    async def fetch(self):
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8-sig")

    def close(self):
        pass


class NetworkSource:
    kind = "network"

    def __init__(self, base_url, timeout=REQUEST_TIMEOUT):
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()

    async def fetch(self):
        response = await asyncio.to_thread(self.session.get, self.base_url, timeout=self.timeout)
        response.raise_for_status()
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(f"{response.status_code} Unexpected status for url: {response.url}",
                                     response=response)
        return decode_body(response)

    def close(self):
        self.session.close()


def decode_body(response):
    """
    Decode a feed response, dropping a UTF-8 byte order mark.
    Bodies without a declared charset are read as UTF-8.
    """
    content = response.content
    if content.startswith(codecs.BOM_UTF8) or not response.encoding:
        return content.decode("utf-8-sig", errors="replace")
    text = response.text
    return text[1:] if text.startswith("\ufeff") else text


def resolve_uri(uri):
    """
    Work out which kind of source a feed URI needs.
    Args:
        uri: http(s) URL, file:// URI or plain local path.
    Returns:
        A (kind, location) tuple, kind being "file" or "network".
    """
    parsed = urlparse(uri)
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https"):
        return NetworkSource.kind, uri
    if scheme == "file":
        return FileSource.kind, url2pathname(parsed.path)
    # A one letter scheme is a Windows drive
    if not scheme or len(scheme) == 1:
        return FileSource.kind, uri
    raise ValueError(f"Unsupported feed URI scheme: {parsed.scheme}")


def open_source(uri):
    kind, location = resolve_uri(uri)
    if kind == NetworkSource.kind:
        return NetworkSource(location)
    return FileSource(location)


def split_lines(text):
    lines = LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_ranges(text, max_lines=MAX_FEED_LINES):
    """
    Turn feed text into address ranges, skipping comments and bad lines.
    Args:
        text: The raw feed contents.
        max_lines: Maximum number of lines to look at.
    Returns:
        A list of IPAddressRange objects in feed order.
    """
    ranges = []
    for line in itertools.islice(split_lines(text), max_lines):
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        address_range = try_parse_range(line)
        if address_range is not None:
            ranges.append(address_range)
    return ranges


class UriFirewallRule:
    """Block rule whose ranges come from a file or http(s) feed."""

    def __init__(self, firewall, rule_prefix, uri, interval):
        """
        Args:
            firewall: The Firewall to block with.
            rule_prefix: Firewall rule group name.
            uri: Feed location, either a file or an http(s) URL.
            interval: datetime.timedelta between feed checks.
        """
        self.firewall = firewall
        self.rule_prefix = rule_prefix
        self.uri = uri
        self.interval = interval
        self.gate = IntervalGate(interval)
        self.source = open_source(uri)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        self.source.close()

    async def update(self, now=None):
        """
        Fetch the feed and replace the rule group if the interval has passed.
        Args:
            now: Current time, defaults to the UTC clock.
        Returns:
            True if the feed was fetched and applied, False if not yet due.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        if not self.gate.should_run(now):
            return False

        text = await self.source.fetch()
        await self.process_result(text)
        return True

    async def process_result(self, text):
        ranges = parse_ranges(text)
        logger.info(f"Submitting {len(ranges)} ranges for rule {self.rule_prefix} from {self.uri}")
        await self.firewall.block_ip_addresses(self.rule_prefix, ranges, None)
