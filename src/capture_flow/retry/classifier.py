"""
Error classification: retryable vs. fatal.

Two policies behind one protocol:

1. TypedErrorClassifier: structured path. Exceptions that declare a boolean
   ``retryable`` attribute, or match a configured exception type, are
   classified without looking at their text.
2. SubstringErrorClassifier: fallback policy. Case-insensitive substring match
   of the failure description against a list of retryable markers. Unknown
   failures are fatal (fail-closed).

Failures come from heterogeneous collaborators, so every failure is still
reducible to a description string via ``describe_error``.
"""

from typing import Iterable, Optional, Protocol, Union

from capture_flow.models.enums import Classification

DEFAULT_RETRYABLE_MARKERS: tuple[str, ...] = (
    "timeout",
    "network",
    "FAILED_TO_START_DEVICE",
    "NotFoundError",
    "device not found",
    "temporary",
)

Failure = Union[BaseException, str]


def describe_error(error: Failure) -> str:
    """
    Render a failure as the description recorded in the ledger.

    That is the exception message, or the type name when the message is
    empty (``TimeoutError()`` -> ``"TimeoutError"``). Type names are not
    otherwise matched; exception types belong to TypedErrorClassifier.
    """
    if isinstance(error, str):
        return error
    return str(error) or type(error).__name__


class ErrorClassifier(Protocol):
    """Protocol for failure classifiers used by the orchestrator."""

    def classify(self, failure: Failure) -> Classification:
        """Return RETRYABLE or FATAL for a failure (exception or description)."""
        ...


class SubstringErrorClassifier:
    """
    Marker-based classifier.

    A failure is retryable when its description contains any marker,
    compared case-insensitively; otherwise it is fatal.
    """

    def __init__(self, markers: Optional[Iterable[str]] = None):
        source = DEFAULT_RETRYABLE_MARKERS if markers is None else markers
        self.markers: tuple[str, ...] = tuple(m.lower() for m in source if m)

    def classify(self, failure: Failure) -> Classification:
        description = describe_error(failure).lower()
        if any(marker in description for marker in self.markers):
            return Classification.RETRYABLE
        return Classification.FATAL

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(markers={list(self.markers)})"


class TypedErrorClassifier:
    """
    Classifier that trusts structured error kinds before text.

    Resolution order for exceptions:
    1. A boolean ``retryable`` attribute on the exception
    2. ``fatal_types`` (checked first, so subclasses can be carved out)
    3. ``retryable_types``
    4. The fallback classifier (markers by default)

    Plain strings go straight to the fallback.
    """

    def __init__(
        self,
        fallback: Optional[ErrorClassifier] = None,
        retryable_types: tuple[type[BaseException], ...] = (TimeoutError, ConnectionError),
        fatal_types: tuple[type[BaseException], ...] = (),
    ):
        self.fallback: ErrorClassifier = fallback or SubstringErrorClassifier()
        self.retryable_types = retryable_types
        self.fatal_types = fatal_types

    def classify(self, failure: Failure) -> Classification:
        if isinstance(failure, BaseException):
            declared = getattr(failure, "retryable", None)
            if isinstance(declared, bool):
                return Classification.RETRYABLE if declared else Classification.FATAL
            if self.fatal_types and isinstance(failure, self.fatal_types):
                return Classification.FATAL
            if self.retryable_types and isinstance(failure, self.retryable_types):
                return Classification.RETRYABLE
        return self.fallback.classify(failure)
