"""Tests for the network resolvers (DoH, ASN, reverse DNS, header dump)."""
import pytest
import httpx
from unittest.mock import AsyncMock, patch

from core.exceptions import LookupFailure, ResolverTimeout
from fetch.asn_client import lookup_asn, parse_asn
from fetch.dns_client import normalize_hostname, query_dns, reverse_lookup, reverse_pointer
from fetch.headers_client import fetch_headers, parse_header_dump
from fetch.http_client import fetch_json, fetch_url
from models.network import AsnStatus, DnsAnswer, RECORD_A, RECORD_CNAME, RECORD_PTR


def test_record_type_codes():
    assert (RECORD_A, RECORD_CNAME, RECORD_PTR) == (1, 5, 12)


@pytest.mark.asyncio
async def test_fetch_url_converts_timeout():
    with patch.object(httpx.AsyncClient, "get", AsyncMock(side_effect=httpx.ReadTimeout("timed out"))):
        with pytest.raises(ResolverTimeout) as exc_info:
            await fetch_url("https://dns.example/resolve", timeout=0.5)
    assert exc_info.value.error_code == "RESOLVER_TIMEOUT"
    assert exc_info.value.details["timeout"] == 0.5


@pytest.mark.asyncio
async def test_fetch_url_rejects_non_2xx():
    request = httpx.Request("GET", "https://dns.example/resolve")
    with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=httpx.Response(503, request=request))):
        with pytest.raises(LookupFailure, match="HTTP 503"):
            await fetch_url("https://dns.example/resolve")


@pytest.mark.asyncio
async def test_fetch_url_converts_transport_errors():
    error = httpx.ConnectError("connection refused")
    with patch.object(httpx.AsyncClient, "get", AsyncMock(side_effect=error)):
        with pytest.raises(LookupFailure):
            await fetch_url("https://dns.example/resolve")


@pytest.mark.asyncio
async def test_fetch_json_rejects_malformed_body():
    request = httpx.Request("GET", "https://ipinfo.example/1.2.3.4/json")
    response = httpx.Response(200, text="<html>rate limited</html>", request=request)
    with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)):
        with pytest.raises(LookupFailure, match="Malformed JSON"):
            await fetch_json("https://ipinfo.example/1.2.3.4/json")


@pytest.mark.asyncio
async def test_query_dns_parses_answers():
    payload = {
        "Status": 0,
        "Answer": [
            {"name": "www.example.com.", "type": 5, "TTL": 300, "data": "example.global.fastly.net."},
            {"name": "example.global.fastly.net.", "type": 1, "TTL": 30, "data": "151.101.1.57"},
        ],
    }
    with patch("fetch.dns_client.fetch_json", AsyncMock(return_value=payload)) as mock_fetch:
        answers = await query_dns("www.example.com", "A", doh_url="https://dns.example/resolve")

    assert answers == [
        DnsAnswer(type=RECORD_CNAME, data="example.global.fastly.net."),
        DnsAnswer(type=RECORD_A, data="151.101.1.57"),
    ]
    kwargs = mock_fetch.call_args.kwargs
    assert kwargs["params"] == {"name": "www.example.com", "type": "A"}
    assert kwargs["headers"]["Accept"] == "application/dns-json"


@pytest.mark.asyncio
async def test_query_dns_without_answers_returns_empty_list():
    with patch("fetch.dns_client.fetch_json", AsyncMock(return_value={"Status": 3})):
        assert await query_dns("missing.example") == []


@pytest.mark.asyncio
async def test_query_dns_malformed_answer_is_lookup_failure():
    with patch("fetch.dns_client.fetch_json", AsyncMock(return_value={"Answer": [{"type": "A?"}]})):
        with pytest.raises(LookupFailure):
            await query_dns("example.com")


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", [5, True, "151.101.1.57", {"type": 1, "data": "151.101.1.57"}])
async def test_query_dns_non_list_answer_is_lookup_failure(answer):
    with patch("fetch.dns_client.fetch_json", AsyncMock(return_value={"Answer": answer})):
        with pytest.raises(LookupFailure, match="Malformed DNS response"):
            await query_dns("example.com")


def test_reverse_pointer_reverses_octets():
    assert reverse_pointer("104.16.132.229") == "229.132.16.104.in-addr.arpa"


def test_normalize_hostname():
    assert normalize_hostname("Example.Global.Fastly.NET.") == "example.global.fastly.net"


@pytest.mark.asyncio
async def test_reverse_lookup_returns_ptr_hostname():
    answers = [DnsAnswer(type=RECORD_PTR, data="a23-1-2-3.deploy.static.akamaitechnologies.com.")]
    with patch("fetch.dns_client.query_dns", AsyncMock(return_value=answers)) as mock_query:
        hostname = await reverse_lookup("23.1.2.3")

    assert hostname == "a23-1-2-3.deploy.static.akamaitechnologies.com"
    assert mock_query.call_args.args[:2] == ("3.2.1.23.in-addr.arpa", "PTR")


@pytest.mark.asyncio
async def test_reverse_lookup_degrades_to_none():
    with patch("fetch.dns_client.query_dns", AsyncMock(side_effect=ResolverTimeout("https://dns.example", 5.0))):
        assert await reverse_lookup("23.1.2.3") is None
    with patch("fetch.dns_client.query_dns", AsyncMock(return_value=[])):
        assert await reverse_lookup("23.1.2.3") is None
    assert await reverse_lookup("not-an-ip") is None


@pytest.mark.parametrize(
    "org,expected",
    [
        ("AS13335 Cloudflare, Inc.", (13335, AsnStatus.FOUND)),
        ("as54113 Fastly", (54113, AsnStatus.FOUND)),
        ("Cloudflare, Inc.", (None, AsnStatus.UNPARSEABLE)),
        ("ASN13335 Cloudflare", (None, AsnStatus.UNPARSEABLE)),
        ("", (None, AsnStatus.MISSING)),
        (None, (None, AsnStatus.MISSING)),
        (13335, (None, AsnStatus.UNPARSEABLE)),
        (["AS13335"], (None, AsnStatus.UNPARSEABLE)),
    ],
)
def test_parse_asn(org, expected):
    assert parse_asn(org) == expected


@pytest.mark.asyncio
async def test_lookup_asn_builds_record():
    payload = {"ip": "104.16.132.229", "org": "AS13335 Cloudflare, Inc.", "country": "US", "city": "San Francisco"}
    with patch("fetch.asn_client.fetch_json", AsyncMock(return_value=payload)) as mock_fetch:
        record = await lookup_asn("104.16.132.229", asn_url="https://ipinfo.example/{ip}/json")

    assert mock_fetch.call_args.args[0] == "https://ipinfo.example/104.16.132.229/json"
    assert record.asn == 13335
    assert record.asn_status is AsnStatus.FOUND
    assert record.organization == "AS13335 Cloudflare, Inc."
    assert record.country == "US"
    assert record.city == "San Francisco"


@pytest.mark.asyncio
async def test_lookup_asn_separates_missing_from_unparseable():
    with patch("fetch.asn_client.fetch_json", AsyncMock(return_value={"ip": "10.0.0.1", "bogon": True})):
        missing = await lookup_asn("10.0.0.1")
    with patch("fetch.asn_client.fetch_json", AsyncMock(return_value={"org": "Private network"})):
        unparseable = await lookup_asn("10.0.0.1")

    assert (missing.asn, missing.asn_status) == (None, AsnStatus.MISSING)
    assert (unparseable.asn, unparseable.asn_status) == (None, AsnStatus.UNPARSEABLE)


@pytest.mark.asyncio
async def test_lookup_asn_non_string_org_is_unparseable():
    with patch("fetch.asn_client.fetch_json", AsyncMock(return_value={"org": 13335, "country": "US"})):
        record = await lookup_asn("1.1.1.1")

    assert record.ip == "1.1.1.1"
    assert (record.asn, record.asn_status) == (None, AsnStatus.UNPARSEABLE)
    assert record.organization is None
    assert record.country == "US"


@pytest.mark.asyncio
async def test_lookup_asn_failure_returns_none():
    with patch("fetch.asn_client.fetch_json", AsyncMock(side_effect=LookupFailure("HTTP 429", "https://ipinfo.example"))):
        assert await lookup_asn("1.2.3.4") is None


def test_parse_header_dump():
    text = (
        "HTTP/2 200 \n"
        "date: Tue, 01 Oct 2024 10:00:00 GMT\n"
        "CF-RAY: 8ca1b2c3d4e5f6a7-AMS\n"
        "server: cloudflare\n"
        "\n"
        "not a header line\n"
        "X-Cache: MISS\n"
        "X-Cache: HIT\n"
        "link: <https://example.com/a>; rel=preload\n"
    )
    headers = parse_header_dump(text)

    assert headers == {
        "date": "Tue, 01 Oct 2024 10:00:00 GMT",
        "CF-RAY": "8ca1b2c3d4e5f6a7-AMS",
        "server": "cloudflare",
        "X-Cache": "HIT",
        "link": "<https://example.com/a>; rel=preload",
    }
    # Names keep their case
    assert "cf-ray" not in headers


@pytest.mark.asyncio
async def test_fetch_headers_passes_domain_as_query():
    with patch("fetch.headers_client.fetch_text", AsyncMock(return_value="HTTP/1.1 200 OK\nX-Fastly: 1\n")) as mock_fetch:
        headers = await fetch_headers("example.com", headers_url="https://headers.example/")

    assert headers == {"X-Fastly": "1"}
    assert mock_fetch.call_args.args[0] == "https://headers.example/"
    assert mock_fetch.call_args.kwargs["params"] == {"q": "example.com"}


@pytest.mark.asyncio
async def test_fetch_headers_propagates_failures():
    with patch("fetch.headers_client.fetch_text", AsyncMock(side_effect=LookupFailure("HTTP 500", "https://headers.example/"))):
        with pytest.raises(LookupFailure):
            await fetch_headers("example.com")
