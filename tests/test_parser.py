from imapbridge.imap.fetch_response import expand_uid_set, iter_fetch_pieces, parse_copyuid, parse_flags, parse_uid
from imapbridge.imap.parser import extract_text_preview, format_date, parse_overview, truncate_text
from imapbridge.log import scrub_secrets


def test_iter_fetch_pieces_mixed_shapes():
    data = [(b"1 (UID 5 FLAGS (\\Seen) BODY[] {3}", b"abc"), b")", None]
    pieces = list(iter_fetch_pieces(data))
    assert pieces[0].payload == b"abc"
    assert parse_uid(pieces[0].meta) == 5
    assert parse_flags(pieces[0].meta) == ["\\Seen"]
    assert pieces[1].payload is None
    assert len(pieces) == 2


def test_expand_uid_set():
    assert expand_uid_set("304,319:320") == [304, 319, 320]
    assert expand_uid_set("7:5") == [5, 6, 7]


def test_parse_copyuid():
    assert parse_copyuid([b"[COPYUID 38505 304,319:320 3956:3958] Done"]) == (
        38505,
        {304: 3956, 319: 3957, 320: 3958},
    )
    assert parse_copyuid([b"Completed", None]) is None


def test_parse_overview_headers():
    raw = (
        b"From: Alice <alice@example.com>\r\n"
        b"Subject: =?utf-8?q?Caf=C3=A9?=\r\n"
        b"Date: Tue, 02 Jan 2024 08:30:00 +0100\r\n"
        b"\r\n"
    )
    ov = parse_overview(9, ["\\Seen"], raw)
    assert ov.uid == 9
    assert ov.from_ == "Alice <alice@example.com>"
    assert ov.subject == "Café"
    assert ov.date == "2024-01-02T08:30:00+01:00"
    assert ov.to is None


def test_format_date_falls_back_to_raw():
    assert format_date("not a date") == "not a date"
    assert format_date(None) is None


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("abcdefghij", 5) == "abcd…"


def test_extract_text_preview_without_body():
    assert extract_text_preview(b"", 100) is None


def test_scrub_secrets():
    payload = {"host": "h", "password": "pw", "nested": [{"api_token": "t"}]}
    assert scrub_secrets(payload) == {
        "host": "h",
        "password": "[REDACTED]",
        "nested": [{"api_token": "[REDACTED]"}],
    }
