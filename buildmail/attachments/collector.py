"""Resolution of attachment patterns into size-bounded attachment entries."""

import threading
from typing import Any, List, Mapping, Optional, Union

from buildmail.diagnostics import DiagnosticsSink, LoggerDiagnostics
from buildmail.logging import get_logger
from buildmail.logging.context import log_context
from buildmail.workspace import ResolvedFile, Workspace

from .content_types import content_type_for
from .exceptions import AttachmentEntryError, TemplateExpansionError
from .models import (
    AttachmentEntry,
    AttachmentOutcome,
    AttachmentSpec,
    CollectionResult,
    SizeBudget,
    content_id_for,
)
from .templating import JinjaTemplateExpander, TemplateExpander

logger = get_logger(__name__, component="collector")


class AttachmentCollector:
    """Turns an attachment pattern into a list of attachment entries.

    The collection pass:
    1. Expands placeholders in the whole pattern string
    2. Splits it on commas, ignoring blank segments
    3. Lists each glob pattern in the workspace
    4. Admits each match against the shared SizeBudget, in provider order
    5. Builds an entry per admitted file and commits its size

    Expected conditions (no workspace, blank pattern, no matches, file over
    budget, rejected entry) are reported to the diagnostics sink and never
    raised. I/O failures end the pass early and keep the entries gathered so
    far; cancellation ends the pass and discards them.
    """

    def __init__(
        self,
        spec: Union[AttachmentSpec, str, None],
        expander: Optional[TemplateExpander] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        """Initialize the collector.

        Args:
            spec: Attachment pattern (AttachmentSpec or raw string)
            expander: Placeholder expander (Jinja2 by default)
            diagnostics: Progress/error sink (structured logger by default)
        """
        if isinstance(spec, AttachmentSpec):
            self.spec = spec
        else:
            self.spec = AttachmentSpec(spec or "")
        self.expander = expander or JinjaTemplateExpander()
        self.diagnostics = diagnostics or LoggerDiagnostics()

    def collect(
        self,
        workspace: Optional[Workspace],
        budget: SizeBudget,
        template_context: Optional[Mapping[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[AttachmentEntry]:
        """Collect attachment entries for the configured pattern.

        Args:
            workspace: Workspace to search, or None if the build has none
            budget: Size budget shared across the whole notification
            template_context: Variables for placeholder expansion
            cancel_event: Optional event that aborts the pass when set

        Returns:
            List of AttachmentEntry, possibly empty. Never raises.
        """
        return self.collect_outcomes(workspace, budget, template_context, cancel_event).entries

    def collect_outcomes(
        self,
        workspace: Optional[Workspace],
        budget: SizeBudget,
        template_context: Optional[Mapping[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CollectionResult:
        """Run a collection pass and return every per-file outcome.

        Same contract as collect(), with skipped and failed candidates
        included in the result.
        """
        result = CollectionResult()

        if workspace is None:
            self.diagnostics.error("Error: No workspace found!")
            logger.warning(
                "No workspace available for attachments",
                extra={"event": "attachments.workspace.missing"},
            )
            return result

        if self.spec.is_blank():
            logger.debug(
                "No attachment pattern configured",
                extra={"event": "attachments.pattern.blank"},
            )
            return result

        try:
            self._gather(workspace, budget, template_context, cancel_event, result)

        except InterruptedError as e:
            # InterruptedError is an OSError; it must be handled first
            self._abort(result, f"Interrupted in processing attachments: {e}", interrupted=True)
            budget.release(result.accepted_bytes)
            self._discard_entries(result)

        except TemplateExpansionError as e:
            self._abort(result, f"Error expanding attachment pattern: {e}")

        except OSError as e:
            self._abort(result, f"Error accessing files to attach: {e}")

        logger.info(
            f"Attachment collection finished: {result.accepted_count} attached, "
            f"{result.skipped_count} skipped, {result.failed_count} failed",
            extra={
                "event": "attachments.collect.completed",
                "accepted": result.accepted_count,
                "skipped": result.skipped_count,
                "failed": result.failed_count,
                "accepted_bytes": result.accepted_bytes,
                "aborted": result.aborted,
                "interrupted": result.interrupted,
                "budget_total": budget.total,
                "budget_ceiling": budget.ceiling,
            },
        )
        return result

    def _gather(
        self,
        workspace: Workspace,
        budget: SizeBudget,
        template_context: Optional[Mapping[str, Any]],
        cancel_event: Optional[threading.Event],
        result: CollectionResult,
    ) -> None:
        """Expand, split and resolve every pattern, appending outcomes to result.

        Raises:
            TemplateExpansionError: If the pattern cannot be expanded
            InterruptedError: If cancel_event is set
            OSError: If the workspace cannot be listed or a file inspected
        """
        expanded = self.expander.expand(self.spec.pattern, template_context)

        for pattern in AttachmentSpec.split_patterns(expanded):
            _check_cancelled(cancel_event)

            with log_context(pattern=pattern):
                files = workspace.list(pattern)

                if not files:
                    self.diagnostics.info(f"No file(s) found to attach for {pattern}")
                    logger.debug(
                        f"No files matched {pattern}",
                        extra={"event": "attachments.pattern.no_match"},
                    )
                    continue

                for resolved in files:
                    _check_cancelled(cancel_event)
                    result.outcomes.append(self._consider(resolved, budget))

    def _consider(self, resolved: ResolvedFile, budget: SizeBudget) -> AttachmentOutcome:
        """Decide on one candidate file and report the decision."""
        name = resolved.name
        size = resolved.length()

        if not budget.admits(size):
            self.diagnostics.info(
                f"Skipping `{name}' ({size} bytes) - too large for maximum attachments size"
            )
            logger.info(
                f"Skipping {name}: over attachment budget",
                extra={
                    "event": "attachments.file.skipped",
                    "attachment": name,
                    "size": size,
                    "budget_total": budget.total,
                    "budget_ceiling": budget.ceiling,
                    "budget_remaining": budget.remaining,
                },
            )
            return AttachmentOutcome.skipped(name, size, "too large for maximum attachments size")

        try:
            entry = AttachmentEntry(
                name=name,
                content_type=content_type_for(name),
                open_stream=resolved.open_read,
                content_id=content_id_for(name),
                size=size,
            )
        except AttachmentEntryError as e:
            self.diagnostics.info(f"Error adding `{name}' as attachment - {e}")
            logger.warning(
                f"Could not build attachment entry for {name}: {e}",
                extra={"event": "attachments.file.failed", "attachment": name},
            )
            return AttachmentOutcome.failed(name, size, str(e))

        budget.commit(size)
        self.diagnostics.info(f"File {resolved} was attached")
        logger.debug(
            f"Attached {name}",
            extra={
                "event": "attachments.file.attached",
                "attachment": name,
                "size": size,
                "content_type": entry.content_type,
            },
        )
        return AttachmentOutcome.accepted(entry, size)

    def _abort(self, result: CollectionResult, message: str, interrupted: bool = False) -> None:
        result.aborted = True
        result.interrupted = interrupted
        result.abort_reason = message
        self.diagnostics.error(message)
        logger.error(
            message,
            extra={
                "event": "attachments.collect.interrupted" if interrupted else "attachments.collect.failed",
            },
        )

    @staticmethod
    def _discard_entries(result: CollectionResult) -> None:
        # Entries open their streams lazily, so discarding them leaves nothing open
        for outcome in result.outcomes:
            outcome.entry = None


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise InterruptedError("attachment collection was cancelled")
