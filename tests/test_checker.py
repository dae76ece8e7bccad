import json
import logging

import pytest

from aws_ip_check.cache import RangeStore
from aws_ip_check.checker import MembershipChecker, parse_ip
from aws_ip_check.errors import InvalidInput
from aws_ip_check.models import AddressRange

SAMPLE_DATA = {
    "syncToken": "1700000000",
    "createDate": "2024-01-01-00-00-00",
    "prefixes": [
        {"ip_prefix": "not-a-cidr", "region": "us-east-1", "service": "EC2"},
        {"ip_prefix": "13.32.0.0/15", "region": "GLOBAL", "service": "AMAZON"},
        {"ip_prefix": "13.32.0.0/15", "region": "GLOBAL", "service": "CLOUDFRONT"},
        {"ip_prefix": "3.5.140.0/22", "region": "ap-northeast-2", "service": "S3"},
    ],
    "ipv6_prefixes": [
        {"ipv6_prefix": "2600:1f18::/33", "region": "us-east-1", "service": "EC2"},
        {"ipv6_prefix": "::/0", "region": "GLOBAL", "service": "AMAZON"},
    ],
}


@pytest.fixture
def store(tmp_path):
    path = tmp_path / "ip-ranges.json"
    path.write_text(json.dumps(SAMPLE_DATA))
    return RangeStore(cache_file_path=path)


@pytest.fixture
def checker(store):
    return MembershipChecker(store)


@pytest.mark.parametrize(
    "ip",
    ["13.32.91.219", "0.0.0.0", "255.255.255.255", " 10.0.0.1 ", "::1", "2001:db8::1", "::ffff:10.0.0.1", "fe80::1"],
)
def test_well_formed_addresses_are_accepted(checker, ip):
    checker.check(ip)


@pytest.mark.parametrize(
    "ip",
    ["a.a.a.a", "2001:cdba::3257:9652:XX:XX:XX:XX", "", "256.1.1.1", "1.2.3", "13.32.0.0/15", "localhost"],
)
def test_malformed_addresses_are_rejected(checker, store, ip):
    with pytest.raises(InvalidInput, match=r"malformed IP provided \["):
        checker.check(ip)
    assert store.ranges is None


def test_parse_ip_unwraps_ipv4_mapped():
    assert str(parse_ip("::ffff:13.32.91.219")) == "13.32.91.219"


def test_found(checker):
    result = checker.check("13.32.91.219")
    assert result.found
    assert result.range == AddressRange(cidr="13.32.0.0/15", region="GLOBAL", service="AMAZON")
    assert result.matches == (result.range,)


def test_not_found(checker):
    result = checker.check("192.168.0.1")
    assert not result.found
    assert result.range is None
    assert result.matches == ()


def test_exhaustive_collects_every_match_in_order(checker):
    result = checker.check("13.32.91.219", exhaustive=True)
    assert [m.service for m in result.matches] == ["AMAZON", "CLOUDFRONT"]
    assert result.range.service == "AMAZON"


def test_ipv6_match(checker):
    result = checker.check("2600:1f18::1")
    assert result.found
    assert result.range.cidr == "2600:1f18::/33"


def test_ipv4_mapped_address_matches_ipv4_range(checker):
    result = checker.check("::ffff:3.5.141.1")
    assert result.range.service == "S3"


def test_ipv4_address_never_matches_ipv6_network(checker):
    assert not checker.check("10.0.0.1").found


def test_malformed_cidr_is_skipped(checker, caplog):
    with caplog.at_level(logging.WARNING, logger="aws_ip_check.checker"):
        result = checker.check("3.5.140.10")
    assert result.found
    assert [s.cidr for s in result.skipped] == ["not-a-cidr"]
    assert "skipping malformed CIDR [not-a-cidr]" in caplog.text


def test_check_refreshes_store_once(checker, store):
    checker.check("13.32.91.219")
    first = store.last_refreshed
    checker.check("192.168.0.1")
    assert store.last_refreshed == first


def test_result_ip_has_no_surrounding_whitespace(checker):
    assert checker.check("  13.32.91.219\n").ip == "13.32.91.219"
