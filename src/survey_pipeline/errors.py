"""Error taxonomy for the survey ingestion pipeline.

Only ``MalformedInput`` and ``NoReferenceAvailable`` abort a batch. The other
errors are raised per record and turned into diagnostics by the caller.
"""

from __future__ import annotations


class SurveyPipelineError(Exception):
    """Base class for all pipeline errors."""

    fatal = False

    @property
    def kind(self) -> str:
        return type(self).__name__


class MalformedInput(SurveyPipelineError):
    """A top-level section of the input document could not be decoded."""

    fatal = True

    def __init__(self, section: str, detail: str = ""):
        self.section = section
        self.detail = detail
        message = f"Could not decode section '{section}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedRecord(SurveyPipelineError):
    """One entry of a section has the wrong shape; the rest of the section is kept."""

    def __init__(self, section: str, index: int, detail: str = ""):
        self.section = section
        self.index = index
        self.detail = detail
        message = f"Could not decode {section}[{index}]"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidCoordinate(SurveyPipelineError):
    """A latitude/longitude value is not a usable number or is out of range."""

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class InsufficientPath(SurveyPipelineError):
    """A conduit has too few valid segments for a path or a derived feature."""

    def __init__(self, conduit: str, valid_count: int, required: int, feature: str = "path"):
        self.conduit = conduit
        self.valid_count = valid_count
        self.required = required
        self.feature = feature
        super().__init__(
            f"Conduit '{conduit}' has {valid_count} valid segment(s); "
            f"{feature} needs at least {required}"
        )


class NoReferenceAvailable(SurveyPipelineError):
    """No reference point was supplied and none could be derived from the input."""

    fatal = True

    def __init__(self, message: str = "No usable reference point in configuration or input"):
        super().__init__(message)


class MissingReference(SurveyPipelineError):
    """Projection was attempted before a reference point was resolved."""

    fatal = True

    def __init__(self, message: str = "Projection requires a resolved reference point"):
        super().__init__(message)
