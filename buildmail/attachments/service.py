"""Top-level attachment operations for a build notification.

This module provides AttachmentService, which ties the collector, the build
log builder and message composition together for one notification. Every
operation here degrades to "fewer attachments" and never raises, so an
attachment problem cannot stop a notification from being sent.
"""

from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional, Union

from buildmail.build import BuildContext
from buildmail.logging import get_logger
from buildmail.logging.context import log_context

from .build_log import LogAttachmentBuilder
from .collector import AttachmentCollector
from .compose import add_attachments
from .models import AttachmentSpec, CollectionResult, SizeBudget
from .templating import JinjaTemplateExpander, TemplateExpander

logger = get_logger(__name__, component="attachments")


@dataclass
class AttachmentReport:
    """Summary of what was attached to one message.

    Attributes:
        attached: Names of attachments appended to the message, in order
        build_log_attached: Whether the build log (plain or zipped) was appended
        collection: Per-file outcomes of the pattern collection pass
        budget_total: Bytes committed against the budget
    """

    attached: List[str] = field(default_factory=list)
    build_log_attached: bool = False
    collection: Optional[CollectionResult] = None
    budget_total: int = 0


class AttachmentService:
    """Attaches workspace files and the build log to notification messages.

    Stateless apart from its constructor arguments; one instance can serve
    any number of notifications.
    """

    def __init__(
        self,
        spec: Union[AttachmentSpec, str, None] = None,
        expander: Optional[TemplateExpander] = None,
        log_builder: Optional[LogAttachmentBuilder] = None,
    ):
        """Initialize the attachment service.

        Args:
            spec: Attachment pattern for workspace files (blank for none)
            expander: Placeholder expander (Jinja2 by default)
            log_builder: Build log attachment builder (creates default if None)
        """
        self.spec = spec if isinstance(spec, AttachmentSpec) else AttachmentSpec(spec or "")
        self.expander = expander or JinjaTemplateExpander()
        self.log_builder = log_builder or LogAttachmentBuilder()

    def attach(
        self,
        message: EmailMessage,
        context: BuildContext,
        budget: Optional[SizeBudget] = None,
    ) -> AttachmentReport:
        """Collect workspace files matching the pattern and append them to the message.

        Args:
            message: Outbound message
            context: Notification context
            budget: Shared size budget (created from the context if None)

        Returns:
            AttachmentReport for this call
        """
        budget = budget if budget is not None else SizeBudget(context.max_attachment_size)
        report = AttachmentReport()

        with log_context(build_id=context.build_id):
            collector = AttachmentCollector(self.spec, self.expander, context.diagnostics)
            try:
                result = collector.collect_outcomes(
                    context.workspace,
                    budget,
                    template_context=context.template_context(),
                    cancel_event=context.cancel_event,
                )
                report.collection = result

                entries = result.entries
                added = add_attachments(message, entries, context.diagnostics)
                report.attached.extend(entry.name for entry in entries[:added])
            except Exception as e:
                context.diagnostics.error(f"Error attaching items to message: {e}")
                logger.error(
                    f"Unexpected error attaching files: {e}",
                    extra={"event": "attachments.attach.failed"},
                    exc_info=True,
                )

        report.budget_total = budget.total
        return report

    def attach_build_log(
        self,
        message: EmailMessage,
        context: BuildContext,
        compress: bool = False,
        budget: Optional[SizeBudget] = None,
    ) -> bool:
        """Append the build log (or ``build.zip``) to the message.

        Args:
            message: Outbound message
            context: Notification context
            compress: Whether to zip the log
            budget: Size budget (created from the context if None)

        Returns:
            True if the log was appended
        """
        budget = budget if budget is not None else SizeBudget(context.max_attachment_size)

        with log_context(build_id=context.build_id):
            if context.build_log is None:
                context.diagnostics.error("Error attaching build log to message: no build log available")
                return False

            entry = self.log_builder.build(context.build_log, budget, compress, context.diagnostics)
            if entry is None:
                return False

            try:
                return add_attachments(message, [entry], context.diagnostics) == 1
            except Exception as e:
                context.diagnostics.error(f"Error attaching build log to message: {e}")
                logger.error(
                    f"Unexpected error attaching build log: {e}",
                    extra={"event": "attachments.build_log.failed"},
                    exc_info=True,
                )
                return False

    def attach_all(
        self,
        message: EmailMessage,
        context: BuildContext,
        attach_log: bool = False,
        compress_log: bool = False,
    ) -> AttachmentReport:
        """Attach workspace files and, optionally, the build log using one budget.

        Args:
            message: Outbound message
            context: Notification context
            attach_log: Whether to attach the build log
            compress_log: Whether to zip the build log

        Returns:
            AttachmentReport covering both steps
        """
        budget = SizeBudget(context.max_attachment_size)
        report = self.attach(message, context, budget)

        if attach_log:
            report.build_log_attached = self.attach_build_log(message, context, compress_log, budget)
            if report.build_log_attached:
                report.attached.append("build.zip" if compress_log else "build.log")

        report.budget_total = budget.total

        logger.info(
            f"Attached {len(report.attached)} item(s) to notification",
            extra={
                "event": "attachments.attach_all.completed",
                "build_id": context.build_id,
                "attached": report.attached,
                "build_log_attached": report.build_log_attached,
                "budget_total": budget.total,
                "budget_ceiling": budget.ceiling,
                "budget_remaining": budget.remaining,
            },
        )
        return report
