"""Error taxonomy for the import engine.

The first four are recovered inside a batch and only counted; the others are
fatal and stop a run before any record is processed.
"""
from __future__ import annotations


class CaseJobsError(Exception):
    pass


class ParseFailure(CaseJobsError):
    def __init__(self, description: object):
        self.description = description
        super().__init__(f"Could not parse description: {description!r}")


class UnresolvedCourt(CaseJobsError):
    def __init__(self, court_name: str):
        self.court_name = court_name
        super().__init__(f"Court not found in registry: {court_name}")


class DuplicateRecord(CaseJobsError):
    def __init__(self, court_id: int, file_number: str):
        self.court_id = court_id
        self.file_number = file_number
        super().__init__(f"Job already exists for court {court_id}, file {file_number}")


class PersistenceFailure(CaseJobsError):
    pass


class MissingPrecondition(CaseJobsError):
    pass


class UnsupportedSource(CaseJobsError):
    pass


__all__ = [
    "CaseJobsError",
    "ParseFailure",
    "UnresolvedCourt",
    "DuplicateRecord",
    "PersistenceFailure",
    "MissingPrecondition",
    "UnsupportedSource",
]
