# scanner_errors.py - Exceptions raised by the ingredient scanner core


class ScannerError(Exception):
    """Base class for scanner errors"""


class ReferenceDataError(ScannerError, ValueError):
    """A reference database record is malformed. Raised at load time."""

    def __init__(self, record_id, problem):
        self.record_id = record_id
        self.problem = problem
        super().__init__(f"Invalid reference record '{record_id}': {problem}")


class InvalidInputError(ScannerError, TypeError):
    """The caller passed structurally malformed input"""
