"""Tests for AttachmentService top-level operations."""

import io
import threading
import zipfile
from unittest.mock import patch

import pytest

from buildmail.attachments import AttachmentService, SizeBudget, build_message
from buildmail.build import BuildContext
from tests.helpers import InMemoryWorkspace, MemoryBuildLog


@pytest.fixture
def message():
    return build_message("Build notification", "body\n")


@pytest.fixture
def context(diagnostics):
    ws = InMemoryWorkspace()
    ws.add("reports/junit.xml", b"<testsuite/>")
    ws.add("logs/app.log", b"log line\n")
    return BuildContext(
        build_id="nightly#42",
        workspace=ws,
        build_log=MemoryBuildLog(b"console output\n"),
        variables={"job": "nightly"},
        diagnostics=diagnostics,
    )


def _attachment_names(message):
    return [part.get_filename() for part in message.iter_attachments()]


class TestAttach:
    """Test suite for AttachmentService.attach."""

    def test_attaches_matching_files(self, message, context):
        report = AttachmentService("reports/*.xml, logs/*.log").attach(message, context)

        assert report.attached == ["junit.xml", "app.log"]
        assert _attachment_names(message) == ["junit.xml", "app.log"]
        assert report.collection.accepted_count == 2
        assert report.budget_total == len(b"<testsuite/>") + len(b"log line\n")

    def test_blank_pattern_attaches_nothing(self, message, context):
        report = AttachmentService("").attach(message, context)

        assert report.attached == []
        assert not message.is_multipart()

    def test_missing_workspace_never_raises(self, message, context, diagnostics):
        context.workspace = None

        report = AttachmentService("*.xml").attach(message, context)

        assert report.attached == []
        assert diagnostics.errors == ["Error: No workspace found!"]

    def test_ceiling_from_context(self, message, context):
        context.max_attachment_size = 10

        report = AttachmentService("logs/*.log").attach(message, context)

        assert report.attached == []
        assert report.collection.skipped_count == 1

    def test_template_context_includes_build_id(self, message, context):
        context.workspace.add("nightly#42.txt", b"x")

        report = AttachmentService("{{ build_id }}.txt").attach(message, context)

        assert report.attached == ["nightly#42.txt"]

    def test_unexpected_error_reported(self, message, context, diagnostics):
        with patch(
            "buildmail.attachments.service.add_attachments",
            side_effect=RuntimeError("mime failure"),
        ):
            report = AttachmentService("reports/*.xml").attach(message, context)

        assert report.attached == []
        assert diagnostics.errors == ["Error attaching items to message: mime failure"]

    def test_listing_error_outside_os_errors_reported(self, message, context, diagnostics):
        context.workspace.list_errors["reports/*.xml"] = ValueError("bad glob")

        report = AttachmentService("reports/*.xml").attach(message, context)

        assert report.attached == []
        assert report.collection is None
        assert not message.is_multipart()
        assert diagnostics.errors == ["Error attaching items to message: bad glob"]

    def test_cancelled_pass_attaches_nothing(self, message, context):
        context.cancel_event = threading.Event()
        context.cancel_event.set()

        report = AttachmentService("reports/*.xml").attach(message, context)

        assert report.attached == []
        assert report.collection.interrupted is True


class TestAttachBuildLog:
    """Test suite for AttachmentService.attach_build_log."""

    def test_plain_log(self, message, context):
        assert AttachmentService().attach_build_log(message, context) is True

        [part] = list(message.iter_attachments())
        assert part.get_filename() == "build.log"
        assert part.get_content_type() == "text/plain"

    def test_compressed_log(self, message, context):
        assert AttachmentService().attach_build_log(message, context, compress=True) is True

        [part] = list(message.iter_attachments())
        assert part.get_filename() == "build.zip"
        assert part.get_content_type() == "application/zip"
        with zipfile.ZipFile(io.BytesIO(part.get_content())) as archive:
            assert archive.read("build.log") == b"console output\n"

    def test_log_too_large(self, message, context, diagnostics):
        context.max_attachment_size = 5

        assert AttachmentService().attach_build_log(message, context) is False
        assert not message.is_multipart()
        assert diagnostics.infos == [
            "Skipping build log attachment - too large for maximum attachments size"
        ]

    def test_no_build_log(self, message, context, diagnostics):
        context.build_log = None

        assert AttachmentService().attach_build_log(message, context) is False
        assert len(diagnostics.errors) == 1
        assert diagnostics.errors[0].startswith("Error attaching build log to message")


class TestAttachAll:
    """Test suite for AttachmentService.attach_all."""

    def test_files_then_log(self, message, context):
        report = AttachmentService("reports/*.xml").attach_all(message, context, attach_log=True)

        assert report.attached == ["junit.xml", "build.log"]
        assert report.build_log_attached is True
        assert _attachment_names(message) == ["junit.xml", "build.log"]

    def test_log_still_attached_after_listing_error(self, message, context, diagnostics):
        context.workspace.list_errors["reports/*.xml"] = ValueError("bad glob")

        report = AttachmentService("reports/*.xml").attach_all(message, context, attach_log=True)

        assert report.attached == ["build.log"]
        assert _attachment_names(message) == ["build.log"]
        assert diagnostics.contains("Error attaching items to message: bad glob")

    def test_compressed_log_name_reported(self, message, context):
        report = AttachmentService("").attach_all(
            message, context, attach_log=True, compress_log=True
        )

        assert report.attached == ["build.zip"]

    def test_log_not_attached_unless_requested(self, message, context):
        report = AttachmentService("reports/*.xml").attach_all(message, context)

        assert report.attached == ["junit.xml"]
        assert report.build_log_attached is False

    def test_one_budget_for_files(self, message, context):
        """Files share a single budget; the log is checked against the ceiling only."""
        context.workspace.add("reports/big.xml", length=90)
        context.max_attachment_size = 100

        report = AttachmentService("reports/*.xml").attach_all(message, context, attach_log=True)

        assert report.attached == ["junit.xml", "build.log"]
        assert report.collection.skipped_count == 1
        assert report.budget_total == len(b"<testsuite/>")

    def test_external_budget_is_used(self, message, context):
        budget = SizeBudget(100, total=95)

        report = AttachmentService("reports/*.xml").attach(message, context, budget)

        assert report.attached == []
        assert budget.total == 95
