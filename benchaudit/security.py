"""
Path validation for audits that read the file system.
"""

import os
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class SecurityError(Exception):
    """Base exception for security-related errors"""
    pass


class PathTraversalError(SecurityError):
    """Exception raised when a path leaves the workspace boundary"""
    pass


class InputValidationError(SecurityError):
    """Exception raised when input validation fails"""
    pass


def sanitize_path(path: str, base_path: str) -> Path:
    """
    Resolve a search location relative to a workspace boundary.

    The location is always interpreted inside ``base_path``; an absolute
    location such as ``/etc`` is joined onto the boundary.

    Args:
        path: Search location from the definition
        base_path: Workspace boundary

    Returns:
        Normalized absolute path inside the boundary

    Raises:
        PathTraversalError: If the location escapes the boundary
        InputValidationError: If the location is invalid
    """
    if path is None:
        raise InputValidationError("Path cannot be empty")

    if '\x00' in path:
        raise InputValidationError("Path contains null bytes")

    base = os.path.normpath(os.path.abspath(base_path))
    target = os.path.normpath(os.path.join(base, path.lstrip('/')))

    if not is_within(target, base):
        logger.warning(f"Path traversal attempt detected: {path} (base: {base_path})")
        raise PathTraversalError(f"relative path {target} is not supported")

    return Path(target)


def is_within(path: str, base_path: str) -> bool:
    """Check that a normalized path is the boundary itself or below it"""
    base = os.path.normpath(base_path)
    path = os.path.normpath(path)
    if base == os.sep:
        return path.startswith(os.sep)
    return path == base or path.startswith(base + os.sep)


def ensure_link_within(path: Path, base_path: str) -> Path:
    """
    Resolve a symbolic link and make sure it stays inside the boundary.

    Raises:
        PathTraversalError: If the link target is outside the boundary
    """
    real_path = os.path.realpath(path)
    base = os.path.realpath(base_path)
    if not is_within(real_path, base):
        logger.warning(f"Symbolic link {path} refers to {real_path} outside {base_path}")
        raise PathTraversalError(
            f"Symbolic link file {path} refers to {real_path}, that is out of the workspace scope"
        )
    return Path(real_path)


def sanitize_pattern(pattern: str) -> str:
    """
    Validate a search term used by a file or text search.

    Raises:
        InputValidationError: If the term is invalid
    """
    if '\x00' in pattern:
        raise InputValidationError("Pattern contains null bytes")

    if len(pattern) > 1000:
        raise InputValidationError("Pattern too long (max 1000 characters)")

    return pattern
