"""projroot: find the project root of a file.

Walks up from a file's directory and tests each ancestor against an ordered
list of patterns.
"""

__version__ = "0.1.0"

from projroot.core import RootMatch, resolve
from projroot.exceptions import (
    ProjRootError,
    ConfigError,
    InvalidDetectionMethodError,
    HistoryError,
    SubmissionError,
)
from projroot.patterns import ListingCache, evaluate
from projroot.session import Buffer, LanguageServer, ProjectSession, ServerAttachHooks
from projroot.worker import Completion, CompletionQueue, RootResolver

__all__ = [
    "__version__",
    "RootMatch",
    "resolve",
    "evaluate",
    "ListingCache",
    "Completion",
    "CompletionQueue",
    "RootResolver",
    "ProjectSession",
    "ServerAttachHooks",
    "Buffer",
    "LanguageServer",
    "ProjRootError",
    "ConfigError",
    "InvalidDetectionMethodError",
    "HistoryError",
    "SubmissionError",
]
