import json
from unittest import mock
from datetime import timedelta

import pytest

from feedguard.rules import (
    add_uri_rule,
    build_updaters,
    load_uri_rules,
    remove_uri_rule,
    save_uri_rules,
    validate_uri_rule,
)
from feedguard.uri_rule import FileSource, NetworkSource


def make_rule(prefix="feed", uri="https://feeds.example.com/list", interval=60):
    return {"rule_prefix": prefix, "uri": uri, "interval_seconds": interval}


def test_load_missing_file_is_empty(tmp_path, caplog):
    assert load_uri_rules(tmp_path / "missing.json") == []
    assert "Rules file not found" in caplog.text


def test_load_invalid_json_is_empty(tmp_path, caplog):
    path = tmp_path / "rules.json"
    path.write_text("{not json")
    assert load_uri_rules(path) == []
    assert "Error decoding rules file" in caplog.text


def test_save_and_load(tmp_path):
    path = tmp_path / "rules.json"
    save_uri_rules([make_rule()], path)
    assert json.loads(path.read_text()) == [make_rule()]
    assert load_uri_rules(path) == [make_rule()]


@pytest.mark.parametrize("rule", [
    "feed",
    {"uri": "https://feeds.example.com/list", "interval_seconds": 60},
    make_rule(prefix=""),
    make_rule(prefix=42),
    make_rule(interval=0),
    make_rule(interval=-5),
    make_rule(interval="60"),
    make_rule(interval=True),
    make_rule(uri=""),
    make_rule(uri="ftp://feeds.example.com/list"),
])
def test_validate_rejects_bad_rules(rule):
    with pytest.raises(ValueError):
        validate_uri_rule(rule)


def test_validate_accepts_file_and_network_rules(tmp_path):
    validate_uri_rule(make_rule())
    validate_uri_rule(make_rule(uri=str(tmp_path / "feed.txt"), interval=0.5))


def test_add_replaces_rule_with_same_prefix(tmp_path):
    path = tmp_path / "rules.json"
    add_uri_rule(make_rule("a"), path)
    add_uri_rule(make_rule("b"), path)
    add_uri_rule(make_rule("a", interval=120), path)
    assert load_uri_rules(path) == [make_rule("b"), make_rule("a", interval=120)]


def test_add_invalid_rule_leaves_file_alone(tmp_path):
    path = tmp_path / "rules.json"
    with pytest.raises(ValueError):
        add_uri_rule(make_rule(interval=0), path)
    assert not path.exists()


def test_remove_rule(tmp_path):
    path = tmp_path / "rules.json"
    save_uri_rules([make_rule("a"), make_rule("b")], path)
    assert remove_uri_rule("a", path)
    assert load_uri_rules(path) == [make_rule("b")]


def test_remove_unknown_rule(tmp_path, caplog):
    path = tmp_path / "rules.json"
    save_uri_rules([make_rule("a")], path)
    assert not remove_uri_rule("missing", path)
    assert load_uri_rules(path) == [make_rule("a")]
    assert "No feed rule named missing" in caplog.text


def test_build_updaters_skips_invalid_rules(firewall, tmp_path, caplog):
    rules = [make_rule("remote"), make_rule("bad", interval=0), make_rule("local", uri=str(tmp_path / "f.txt"))]
    updaters = build_updaters(firewall, rules)
    try:
        assert [u.rule_prefix for u in updaters] == ["remote", "local"]
        assert isinstance(updaters[0].source, NetworkSource)
        assert isinstance(updaters[1].source, FileSource)
        assert updaters[0].interval == timedelta(seconds=60)
        assert all(u.firewall is firewall for u in updaters)
    finally:
        for updater in updaters:
            updater.close()
    assert "Skipping feed rule" in caplog.text


def test_validate_does_not_open_a_session():
    with mock.patch("requests.Session") as session:
        validate_uri_rule(make_rule())
    session.assert_not_called()
