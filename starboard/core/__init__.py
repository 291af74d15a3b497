"""
Core Package - Starboard Evaluation API
starboard/core/__init__.py

Core infrastructure: workspace context, dependencies, exceptions, logging.
"""

from starboard.core.context import CapabilitySet, WorkspaceContext
from starboard.core.exceptions import (
    AlreadyBookedException,
    AlreadyScoredException,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    ForbiddenException,
    ForeignKeyViolationException,
    MissingScoreException,
    RepositoryException,
    StarboardException,
    UnauthorizedException,
    ValidationException,
)

__all__ = [
    # Context
    "CapabilitySet",
    "WorkspaceContext",
    # Exceptions
    "AlreadyBookedException",
    "AlreadyScoredException",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ForbiddenException",
    "ForeignKeyViolationException",
    "MissingScoreException",
    "RepositoryException",
    "StarboardException",
    "UnauthorizedException",
    "ValidationException",
]
