"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RecordLoadError(DomainException):
    """Input record file is missing, unreadable or malformed"""

    def __init__(self, message: str, source: str | None = None, line: int | None = None):
        self.source = source
        self.line = line
        location = ""
        if source:
            location = f"{source}:{line}: " if line is not None else f"{source}: "
        super().__init__(f"{location}{message}")


class IntegrityError(RecordLoadError):
    """Records reference a bank or facility that does not exist or does not match"""

    pass


class DuplicateRecordError(RecordLoadError):
    """Primary key appears more than once"""

    pass


class UnknownFacilityError(DomainException):
    """Ledger operation on a facility id it does not hold"""

    pass
