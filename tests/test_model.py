import json

import pytest

from enigma2player.model import (
    Bouquet,
    Channel,
    EpgEvent,
    attach_epg,
    decode_html_entities,
    format_time,
    normalize_epg_text,
    parse_epg_response,
    parse_services_response,
)


def _channel(service_ref):
    return Channel(position=82, name="ZDF HD", service_ref=service_ref, program=11110)


def _event(shortdesc, longdesc):
    return EpgEvent(shortdesc=shortdesc, longdesc=longdesc)


def _event_with_times(begin, duration, now):
    return EpgEvent(begin_timestamp=begin, duration_sec=duration, now_timestamp=now)


def test_attach_epg_matches_events_by_service_reference():
    service_ref = "1:0:19:2B66:3F3:1:C00000:0:0:0:"
    bouquet = Bouquet(name="Freie Sender", service_ref="bouquet-ref", channels=[_channel(service_ref)])
    event = EpgEvent(
        id=1,
        begin_timestamp=100,
        duration_sec=100,
        title="Heute",
        shortdesc="Kurz",
        longdesc="Lang",
        genre="News",
        sref=service_ref,
        sname="ZDF HD",
        now_timestamp=150,
        remaining=50,
    )

    attached = attach_epg(bouquet, [event]).channels[0].epg

    assert attached.title == "Heute"
    assert attached.progress() == 0.5
    assert attached.description() == "Kurz\n\nLang"


def test_attach_epg_clears_unmatched_channels_and_ignores_empty_sref():
    bouquet = Bouquet(
        name="TV",
        service_ref="b",
        channels=[_channel("a"), _channel("")],
    )
    result = attach_epg(bouquet, [EpgEvent(title="X", sref="")])
    assert [channel.epg for channel in result.channels] == [None, None]
    assert bouquet.channels[0].epg is None


def test_services_response_deserializes_normalized_bouquet_and_channel_names():
    result, bouquets = parse_services_response(
        json.loads(
            """{
            "result": true,
            "services": [{
                "servicename": "TV &amp; Freies TV",
                "servicereference": "bouquet-ref",
                "subservices": [{
                    "pos": 7,
                    "servicename": "ORF 1 HD Snow White &amp; The Huntsman",
                    "servicereference": "service-ref",
                    "program": 1
                }]
            }]
        }"""
        )
    )

    assert result is True
    assert bouquets[0].name == "TV & Freies TV"
    assert bouquets[0].channels[0].name == "ORF 1 HD Snow White & The Huntsman"
    assert bouquets[0].channels[0].position == 7
    assert bouquets[0].channels[0].program == 1


def test_epg_now_response_deserializes_normalized_event_text():
    events = parse_epg_response(
        json.loads(
            """{
            "events": [{
                "title": "Radsport: Giro d&#x27;Italia",
                "shortdesc": "Kurz",
                "longdesc": "Lang &amp; sauber",
                "genre": "Sport &amp; Freizeit",
                "sref": "service-ref",
                "sname": "Eurosport &amp; Co"
            }]
        }"""
        )
    )

    event = events[0]
    assert event.title == "Radsport: Giro d'Italia"
    assert event.sname == "Eurosport & Co"
    assert event.genre == "Sport & Freizeit"
    assert event.description() == "Kurz\n\nLang & sauber"


def test_parse_defaults_and_null_text():
    assert parse_services_response({}) == (False, [])
    events = parse_epg_response({"events": [{"title": None}]})
    assert events == [EpgEvent()]


@pytest.mark.parametrize(
    "payload",
    [
        {"events": [{"begin_timestamp": "soon"}]},
        {"events": [{"title": 5}]},
        {"events": "none"},
        {"events": [[]]},
        {"events": [{"sref": None}]},
        [],
    ],
)
def test_parse_epg_response_rejects_malformed_data(payload):
    with pytest.raises(ValueError):
        parse_epg_response(payload)


def test_parse_services_response_rejects_bad_types():
    with pytest.raises(ValueError):
        parse_services_response({"result": "yes"})
    with pytest.raises(ValueError):
        parse_services_response({"services": [{"subservices": [{"pos": -1}]}]})


def test_epg_event_description_decodes_html_entities_and_escaped_newlines():
    event = _event(
        "Nicky &quot;Koch&quot;",
        "Regie: Holger Haase\n\nDarsteller: Katharina M&uuml;ller-Elmau",
    )
    assert (
        event.description()
        == 'Nicky "Koch"\n\nRegie: Holger Haase\n\nDarsteller: Katharina M\u00fcller-Elmau'
    )


def test_epg_event_description_deduplicates_equal_shortdesc_and_longdesc():
    assert _event("Same &#38; Value", "Same &amp; Value").description() == "Same & Value"


def test_epg_event_description_skips_title_duplicate():
    event = EpgEvent(title="Tagesschau", shortdesc="Tagesschau", longdesc="Die Nachrichten der ARD")
    assert event.description() == "Die Nachrichten der ARD"


def test_epg_event_description_skips_leading_title_line():
    event = EpgEvent(
        title="Atomic Blonde",
        shortdesc="Atomic Blonde\nAction, USA 2017\nAltersfreigabe: ab 16",
        longdesc="Actionthriller",
    )
    assert event.description() == "Action, USA 2017\nAltersfreigabe: ab 16\n\nActionthriller"


def test_epg_event_description_empty():
    assert _event("", "  ").description() == ""


def test_normalize_epg_text_preserves_unknown_entities_and_decodes_numeric_entities():
    assert normalize_epg_text("Foo &unknown; &#x27;bar&#x27;") == "Foo &unknown; 'bar'"


def test_normalize_epg_text_expands_literal_escapes_and_trims_lines():
    assert normalize_epg_text("  a  \\r\\nb \\nc\\r d  ") == "a\nb\nc\n d"


@pytest.mark.parametrize(
    ("raw", "decoded"),
    [
        ("&lt;b&gt;", "<b>"),
        ("&#X41;&#66;", "AB"),
        ("a & b", "a & b"),
        ("&amp", "&amp"),
        ("&#xD800;", "&#xD800;"),
        ("&#x110000;", "&#x110000;"),
        ("&abcdefghijklmnop;", "&abcdefghijklmnop;"),
        ("&szlig;&nbsp;", "\u00df "),
    ],
)
def test_decode_html_entities(raw, decoded):
    assert decode_html_entities(raw) == decoded


def test_epg_event_progress_returns_fraction_inside_event_bounds():
    assert _event_with_times(100, 100, 150).progress() == 0.5


def test_epg_event_progress_clamps_before_start_after_end_and_invalid_duration():
    assert _event_with_times(100, 100, 50).progress() == 0.0
    assert _event_with_times(100, 100, 250).progress() == 1.0
    assert _event_with_times(100, 0, 150).progress() == 0.0
    assert _event_with_times(100, -10, 150).progress() == 0.0


def test_end_timestamp_ignores_negative_duration():
    assert _event_with_times(100, 60, 0).end_timestamp() == 160
    assert _event_with_times(100, -60, 0).end_timestamp() == 100


def test_format_time_uses_offset_from_environment(monkeypatch):
    monkeypatch.setenv("TZ_OFFSET_SECONDS", "0")
    assert format_time(13 * 3600 + 5 * 60) == "13:05"
    assert format_time(0) == "--:--"
    assert format_time(-5) == "--:--"


def test_format_time_defaults_to_two_hours(monkeypatch):
    monkeypatch.delenv("TZ_OFFSET_SECONDS", raising=False)
    assert format_time(60) == "02:01"
    monkeypatch.setenv("TZ_OFFSET_SECONDS", "later")
    assert format_time(60) == "02:01"


def test_format_time_clamps_negative_offset(monkeypatch):
    monkeypatch.setenv("TZ_OFFSET_SECONDS", "-3600")
    assert format_time(3660) == "01:01"


def test_time_range(monkeypatch):
    monkeypatch.setenv("TZ_OFFSET_SECONDS", "0")
    event = _event_with_times(3600, 5400, 0)
    assert event.time_range() == "01:00 - 02:30"
    assert _event_with_times(0, 0, 0).time_range() == "--:-- - --:--"