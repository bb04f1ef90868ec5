from datetime import datetime, timezone

import pytest
import requests

from feedguard.firewall import MemoryFirewall

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_response(status_code, body=b"", url="https://feeds.example.com/list/", encoding="utf-8"):
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.encoding = encoding
    response.url = url
    return response


@pytest.fixture
def firewall():
    return MemoryFirewall()


@pytest.fixture
def feed_file(tmp_path):
    def write(text, name="feed.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return write
