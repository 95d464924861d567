import re

import pytest

from dnslatency.errors import ConfigurationError
from dnslatency.workload import (
    DEFAULT_DOMAINS,
    EDGE_CHARS,
    INTERIOR_CHARS,
    default_domains,
    parse_domains,
    random_domain,
    random_label,
)


LABEL = r"[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"


def assert_valid_label(label, length):
    assert len(label) == length
    assert label[0] in EDGE_CHARS
    assert label[-1] in EDGE_CHARS
    assert all(c in INTERIOR_CHARS for c in label[1:-1])


def test_random_domain_shape():
    for _ in range(20):
        name = random_domain()
        first, second, tld = name.split(".")

        assert tld == "com"
        assert_valid_label(first, 60)
        assert_valid_label(second, 63)
        assert re.fullmatch(rf"{LABEL}\.{LABEL}\.com", name)
        assert len(name) == 128


def test_random_domain_differs_between_calls():
    assert random_domain() != random_domain()


@pytest.mark.parametrize("length", [0, 64, -1])
def test_random_label_rejects_bad_length(length):
    with pytest.raises(ConfigurationError):
        random_label(length)


def test_random_label_length_one_is_single_edge_char():
    for _ in range(50):
        label = random_label(1)
        assert len(label) == 1
        assert label in EDGE_CHARS


def test_random_label_length_two_has_no_interior():
    label = random_label(2)
    assert len(label) == 2
    assert "-" not in label


def test_default_domains_end_with_fresh_random_name():
    domains = default_domains()

    assert domains[:-1] == DEFAULT_DOMAINS
    assert domains[-1].endswith(".com")
    assert len(domains[-1]) == 128
    assert default_domains()[-1] != domains[-1]


def test_parse_domains():
    assert parse_domains("google.com, example.org,,") == ["google.com", "example.org"]
    assert parse_domains("") == []
    assert parse_domains("   ") == []


def test_parse_domains_with_only_separators_fails():
    with pytest.raises(ConfigurationError):
        parse_domains(" , ,")
