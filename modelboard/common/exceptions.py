class BoardError(Exception):
    """Base class for all board, metrics and prototype errors."""


class NotFound(BoardError):
    def __init__(self, slot_name: str, version_id: str = None):
        self.slot_name = slot_name
        self.version_id = version_id
        if version_id:
            message = f"Version {version_id} of slot {slot_name} not found"
        else:
            message = f"Slot {slot_name} not found"
        super().__init__(message)


class InvalidMetadata(BoardError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid metadata: {detail}")


class StorageUnavailable(BoardError):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        message = f"Storage unavailable at {location}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConflictingMetrics(BoardError):
    def __init__(self, buckets: list):
        self.buckets = buckets
        shown = ", ".join(str(b) for b in buckets[:5])
        more = f" (+{len(buckets) - 5} more)" if len(buckets) > 5 else ""
        super().__init__(
            f"New metrics overlap existing buckets {shown}{more}; "
            f"pass overwrite=True to replace them"
        )


class PrototypeMismatch(BoardError):
    def __init__(self, problems: list):
        self.problems = problems
        super().__init__("Data does not match prototype: " + "; ".join(problems))
