"""Tests for appending attachment entries to e-mail messages."""

import io
from email import message_from_bytes, policy

from buildmail.attachments import AttachmentEntry, add_attachments, build_message


def _entry(name, data, content_type="text/plain", content_id=None):
    return AttachmentEntry(name, content_type, lambda: io.BytesIO(data), content_id=content_id)


def _failing_entry(name):
    def factory():
        raise OSError(f"{name} vanished")

    return AttachmentEntry(name, "text/plain", factory)


def test_build_message_headers():
    message = build_message(
        "Build #42 failed",
        "See attachments.\n",
        sender="ci@example.com",
        recipients=["dev@example.com", " ", "qa@example.com"],
    )

    assert message["Subject"] == "Build #42 failed"
    assert message["From"] == "ci@example.com"
    assert message["To"] == "dev@example.com, qa@example.com"
    assert message.get_content().strip() == "See attachments."


def test_build_message_without_addresses():
    message = build_message("Subject", "Body\n")
    assert message["From"] is None
    assert message["To"] is None


def test_entries_appended_in_order(diagnostics):
    message = build_message("s", "body\n")
    entries = [
        _entry("a.txt", b"alpha", content_id="<a.txt>"),
        _entry("b.xml", b"<b/>", "application/xml"),
    ]

    added = add_attachments(message, entries, diagnostics)

    assert added == 2
    attachments = list(message.iter_attachments())
    assert [part.get_filename() for part in attachments] == ["a.txt", "b.xml"]
    assert attachments[0]["Content-ID"] == "<a.txt>"
    assert attachments[0].get_content_type() == "text/plain"
    assert attachments[1].get_content_type() == "application/xml"
    assert attachments[1].get_content() == b"<b/>"


def test_message_round_trips_through_bytes(diagnostics):
    message = build_message("s", "body\n")
    add_attachments(message, [_entry("report.bin", b"\x00\x01\x02", "application/octet-stream")], diagnostics)

    parsed = message_from_bytes(message.as_bytes(), policy=policy.default)
    [part] = list(parsed.iter_attachments())

    assert part.get_filename() == "report.bin"
    assert part.get_content() == b"\x00\x01\x02"


def test_read_failure_stops_and_keeps_earlier(diagnostics):
    message = build_message("s", "body\n")
    entries = [_entry("a.txt", b"a"), _failing_entry("b.txt"), _entry("c.txt", b"c")]

    added = add_attachments(message, entries, diagnostics)

    assert added == 1
    assert [p.get_filename() for p in message.iter_attachments()] == ["a.txt"]
    assert diagnostics.errors == ["Error accessing files to attach: b.txt vanished"]


def test_no_entries_leaves_message_unchanged(diagnostics):
    message = build_message("s", "body\n")

    assert add_attachments(message, [], diagnostics) == 0
    assert not message.is_multipart()
