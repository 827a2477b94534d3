"""Tests for the static content type table."""

import pytest

from buildmail.attachments import DEFAULT_CONTENT_TYPE, content_type_for


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("build.log", "text/plain"),
        ("notes.txt", "text/plain"),
        ("junit-report.xml", "application/xml"),
        ("junit-report.XML", "application/xml"),
        ("coverage.json", "application/json"),
        ("build.zip", "application/zip"),
        ("dist.tar.gz", "application/gzip"),
        ("screenshot.png", "image/png"),
        ("manual.pdf", "application/pdf"),
        ("app.jar", "application/java-archive"),
        ("reports/index.html", "text/html"),
    ],
)
def test_known_extensions(filename, expected):
    assert content_type_for(filename) == expected


@pytest.mark.parametrize("filename", ["core", ".gitignore", "data.unknownext", "trailing."])
def test_fallback(filename):
    assert content_type_for(filename) == DEFAULT_CONTENT_TYPE == "application/octet-stream"
