# enigma2player

A library for talking to a Dreambox or other Enigma2 receiver over its web
interface. It lists bouquets and channels, reads the programme guide (EPG)
and resolves the playable stream URL of a channel. It also has helpers for
launch options, desktop entries and audio track menus.

## What it does

- Fetches bouquets from `/api/getallservices` and drops bouquets that have no
  name or no channels. If the receiver answers with `"result": false`, it
  raises `InvalidResponseError`.
- Reads the current programme of a bouquet (`/api/epgnow`) and the full guide
  of a single service (`/api/epgservice`). It attaches "now playing" events to
  channels by service reference.
- Cleans up EPG text. Literal `\n` and `\r` escapes become line breaks. A small
  set of named HTML entities is decoded, along with decimal and hexadecimal
  character references, and unknown entities are kept as they are. Trailing
  spaces are trimmed from each line, and a description that only repeats the
  title is skipped.
- Resolves a channel's stream by reading the first non-empty, non-comment line
  of the receiver's `stream.m3u` playlist.
- Caches the bouquet list for 60 seconds and EPG answers for 90 seconds.
  Changing the receiver address clears every cache. Clones of a client share
  its address and caches.

## Using the client

```python
from enigma2player.api import Enigma2Client, Enigma2Error, http_get

client = Enigma2Client("http://receiver.local", http_get)

try:
    bouquet = client.bouquet_with_epg(0)
except Enigma2Error as err:
    print(f"receiver error: {err}")
else:
    for channel in bouquet.channels:
        event = channel.epg
        if event is not None:
            print(channel.name, event.time_range(), event.title)
            print(f"  {event.progress():.0%} done")

    stream = client.resolve_stream_url(bouquet.channels[0].service_ref)
    print("play:", stream)
```

The client's own failures are all `Enigma2Error`. The more specific classes are:

- `MissingSettingsError`: no receiver address is set.
- `HttpError`: raised by the built-in `http_get`, which uses a 5-second timeout.
- `JsonError`: the body could not be decoded or has the wrong shape.
- `InvalidResponseError`: a rejected service list, a bouquet index that is out
  of range, or a playlist with no URL.

Other methods are `set_base_url`, `clear_cache`, `clone`, `bouquets`,
`epg_now` and `service_epg`. The normalised address is available as the
`base_url` property.

The second argument to `Enigma2Client` is any callable that takes a URL and
returns the response body as text. This lets a stub drive the client in tests:

```python
responses = {
    "http://receiver.local/web/stream.m3u?ref=service-ref":
        "#EXTM3U\nhttp://receiver.local:8001/service-ref\n",
}
client = Enigma2Client("http://receiver.local", responses.__getitem__)
assert client.resolve_stream_url("service-ref") == "http://receiver.local:8001/service-ref"
```

## Data model

`enigma2player.model` has frozen dataclasses `Bouquet`, `Channel` and
`EpgEvent`. Each has a `from_api` constructor that builds it from decoded JSON.
`parse_services_response` and `parse_epg_response` parse whole responses, and
`attach_epg` returns a copy of a bouquet with its events matched to its
channels.

`EpgEvent` provides these methods:

- `progress()`: the elapsed fraction of the event, clamped to 0–1.
- `end_timestamp()`: when the event ends.
- `time_range()`: the start and end as clock times.
- `description()`: the short and long descriptions combined.

`time_range()` and `format_time` show clock times with the offset from the
`TZ_OFFSET_SECONDS` environment variable. When it is unset or invalid, the
offset is two hours, and negative offsets count as zero. Timestamps of zero or
less are shown as `--:--`.

```python
from enigma2player.model import normalize_epg_text

normalize_epg_text("Foo &unknown; &#x27;bar&#x27;")   # "Foo &unknown; 'bar'"
```

## URL helpers

```python
from enigma2player.urls import epg_now_url, extract_stream_url, normalize_base_url

normalize_base_url("  http://receiver.local/  ")   # "http://receiver.local"
epg_now_url("http://receiver.local/", '1:7:1:FROM BOUQUET "tv"')
# "http://receiver.local/api/epgnow?bRef=1%3A7%3A1%3AFROM+BOUQUET+%22tv%22"
extract_stream_url("#EXTM3U\nhttp://receiver.local:8001/ref\n")
# "http://receiver.local:8001/ref"
```

`has_supported_url_scheme` accepts only `http://` and `https://` addresses.

## Launch options

`enigma2player.cli.parse_args` turns a list of arguments into a `CliOptions`.
It understands these flags:

- `--show-picker`: open the channel picker on start.
- `--start-first`: start playing the first channel.
- `--box-url URL` or `--box-url=URL`: the receiver address to use.

Unknown arguments are ignored.

## Desktop entries

`enigma2player.desktop` has these helpers:

- `desktop_entry(exec_path, icon_path)`: renders the text of a `.desktop` file.
- `quote_desktop_path`: quotes an `Exec` path and escapes `"`, `\`, `` ` ``
  and `$`.
- `user_data_dir()`: returns `$XDG_DATA_HOME`, or `~/.local/share` as a
  fallback.
- `executable_path()`: returns the path of the running program.

The module only builds these values and writes no files itself.

## Audio tracks

`enigma2player.tracks` turns a media player's track list into `AudioTrack`
values:

- `audio_tracks_from_track_list` takes a list of dictionaries with keys such as
  `type`, `id`, `title`, `lang`, `codec` and `demux-channels`, and skips album
  art.
- `audio_track_label` builds readable labels such as `English (eng) - 5.1 ac3`.
- `audio_tracks_in_menu_order` puts the selected track last.
- `audio_track_button_label` marks the selected track with `(current)`.

## What it does not do

This package does not play video, open a window or draw a user interface. It
does not store settings on disk and installs no command. It is the receiver
client and the helper logic, meant to be used from a player application.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.