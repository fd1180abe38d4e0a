import pytest

from enigma2player.urls import (
    encode_query_value,
    epg_now_url,
    epg_service_url,
    extract_stream_url,
    has_supported_url_scheme,
    normalize_base_url,
    services_url,
    stream_m3u_url,
)


def test_epg_now_url_percent_encodes_bouquet_reference():
    url = epg_now_url("http://receiver.local/", '1:7:1:FROM BOUQUET "tv"')
    assert url == "http://receiver.local/api/epgnow?bRef=1%3A7%3A1%3AFROM+BOUQUET+%22tv%22"


def test_epg_service_url_percent_encodes_service_reference():
    url = epg_service_url("http://receiver.local/", "1:0:19:283D:3FB:1:C00000:0:0:0:")
    assert (
        url
        == "http://receiver.local/api/epgservice?sRef=1%3A0%3A19%3A283D%3A3FB%3A1%3AC00000%3A0%3A0%3A0%3A"
    )


def test_stream_m3u_url_percent_encodes_service_reference():
    url = stream_m3u_url("http://receiver.local/", "1:0:19:2B66:3F3:1:C00000:0:0:0:")
    assert (
        url
        == "http://receiver.local/web/stream.m3u?ref=1%3A0%3A19%3A2B66%3A3F3%3A1%3AC00000%3A0%3A0%3A0%3A"
    )


def test_services_url_appends_api_path():
    assert services_url(" http://receiver.local// ") == "http://receiver.local/api/getallservices"


def test_extract_stream_url_returns_first_non_comment_playlist_entry():
    m3u = "#EXTM3U\n#EXTVLCOPT:http-reconnect=true\nhttp://receiver.local:8001/ref\n"
    assert extract_stream_url(m3u) == "http://receiver.local:8001/ref"


def test_extract_stream_url_returns_none_for_comment_only_playlist():
    assert extract_stream_url("#EXTM3U\n#EXTVLCOPT:http-reconnect=true\n\n") is None


def test_extract_stream_url_trims_whitespace_and_crlf():
    assert extract_stream_url("#EXTM3U\r\n   \r\n  http://a/b  \r\n") == "http://a/b"


def test_normalize_base_url_trims_whitespace_and_trailing_slash_without_adding_scheme():
    assert normalize_base_url("  http://receiver.local/  ") == "http://receiver.local"
    assert normalize_base_url("receiver.local/") == "receiver.local"
    assert normalize_base_url("   ") == ""


def test_has_supported_url_scheme_accepts_only_http_and_https():
    assert has_supported_url_scheme("http://receiver.local")
    assert has_supported_url_scheme("https://receiver.local")
    assert not has_supported_url_scheme("receiver.local")


@pytest.mark.parametrize(
    ("raw", "encoded"),
    [
        ("a b", "a+b"),
        ("*-._", "*-._"),
        ("~", "%7E"),
        ("\u00fc", "%C3%BC"),
        ("a/b?c=d&e", "a%2Fb%3Fc%3Dd%26e"),
    ],
)
def test_encode_query_value_uses_form_encoding(raw, encoded):
    assert encode_query_value(raw) == encoded