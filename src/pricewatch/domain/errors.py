"""Domain error taxonomy.

Submission problems are reported as data (see ``SubmissionResult``); everything
here is raised for review actions, direct writes and misuse.
"""

from __future__ import annotations


class PricewatchError(Exception):
    """Base class for all domain errors."""


class ValidationError(PricewatchError, ValueError):
    """Input is malformed; nothing was persisted."""


class UnsupportedWorkflowTypeError(ValidationError):
    """No change payload is defined for the requested (entity type, change type)."""


class NotFoundError(PricewatchError, LookupError):
    """A referenced workflow or catalog entity does not exist."""


class StateConflictError(PricewatchError):
    """The workflow is no longer in a state that allows the requested transition."""


class DuplicateObservationError(StateConflictError):
    """An observation with the pre-allocated id was already committed."""


class AuthorizationError(PricewatchError, PermissionError):
    """The caller's role does not permit the operation."""


class DuplicatePendingWorkflowError(PricewatchError):
    """Storage rejected a workflow because an equivalent one is already pending."""


class AuditWriteError(PricewatchError):
    """An audit entry could not be written."""
