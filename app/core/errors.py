class CompositionError(RuntimeError):
    """Base class for failures that abort a composition request."""

    status_code = 500


class MissingFieldError(CompositionError):
    status_code = 400


class NotFoundError(CompositionError):
    status_code = 400


class FetchError(CompositionError):
    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        message = f"Failed to fetch {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoMediaError(CompositionError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No {kind} files to concatenate")


class ConcatenationError(CompositionError):
    def __init__(self, kind: str, detail: str = "") -> None:
        self.kind = kind
        message = f"Failed to concatenate {kind} files"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FontResolutionError(CompositionError):
    pass


class EmptyTimelineError(CompositionError):
    pass


class LayerAlignmentError(CompositionError):
    pass


class EncodeError(CompositionError):
    pass


class UploadError(CompositionError):
    pass


class InvalidJobIdError(CompositionError):
    status_code = 400

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Invalid job id: {job_id!r}")
