"""File search audit"""

import logging
import os
import re
import stat
from typing import Iterator, Optional, Tuple

from benchaudit.models import AuditResult, State
from benchaudit.security import SecurityError, sanitize_path, sanitize_pattern
from benchaudit.audit.base import Auditer
from benchaudit.audit.search import (
    SEARCH_CONTAINS,
    SEARCH_EXACT,
    as_bool,
    matches_term,
    normalize_args,
)

logger = logging.getLogger(__name__)

FILE_TYPE_DIRECTORY = 'directory'
FILE_TYPE_SYMLINK = 'symlink'
FILE_TYPE_FILE = 'file'
FILE_TYPE_ALL = 'all'

PERM_EXACT = 'exact'
PERM_ALL_BITS = 'all'
PERM_ANY_BITS = 'any'


def parse_permission(perm: str) -> Tuple[int, str]:
    """
    Parse a permission filter written the way ``find -perm`` takes it.

    ``644`` matches the mode exactly, ``-644`` requires all of the bits and
    ``/644`` any of them.

    Returns:
        Tuple of (permission bits, search mode)

    Raises:
        ValueError: If the permission is not 3 or 4 octal digits
    """
    perm = str(perm).strip()
    if perm.startswith('-'):
        mode = PERM_ALL_BITS
    elif perm.startswith('/'):
        mode = PERM_ANY_BITS
    else:
        mode = PERM_EXACT

    digits = re.sub(r'\D', '', perm)
    if len(digits) not in (3, 4) or not re.fullmatch(r'[0-7]+', digits):
        raise ValueError(f"invalid permission format {perm}")
    return int(digits, 8), mode


class FileSearchAudit(Auditer):
    """Lists the paths below a location that satisfy every configured filter"""

    def __init__(self, path: str, boundary_path: str = '/', search_term: str = '',
                 search_type: str = SEARCH_CONTAINS, file_type: str = FILE_TYPE_ALL,
                 perm: Optional[str] = None, user_id: Optional[int] = None,
                 group_id: Optional[int] = None, count: bool = False):
        self.path = path or ''
        self.boundary_path = boundary_path
        self.search_term = sanitize_pattern(search_term or '')
        self.search_type = search_type or SEARCH_CONTAINS
        self.file_type = file_type or FILE_TYPE_ALL
        self.perm, self.perm_mode = parse_permission(perm) if perm not in (None, '') else (0, None)
        self.user_id = int(user_id) if user_id not in (None, '') else None
        self.group_id = int(group_id) if group_id not in (None, '') else None
        self.count = count

    @classmethod
    def from_payload(cls, payload, boundary_path: str = '/') -> 'FileSearchAudit':
        args = normalize_args(payload)
        return cls(
            path=str(args.get('path', '')),
            boundary_path=boundary_path,
            search_term=str(args.get('search_term', '')),
            search_type=str(args.get('search_type', SEARCH_CONTAINS)),
            file_type=str(args.get('file_type', FILE_TYPE_ALL)),
            perm=args.get('perm'),
            user_id=args.get('user_id'),
            group_id=args.get('group_id'),
            count=as_bool(args.get('count', False)),
        )

    def describe(self) -> str:
        return f"file_search {self.path}"

    def execute(self, *custom_configs) -> AuditResult:
        try:
            root = sanitize_path(self.path, self.boundary_path)
        except SecurityError as e:
            logger.warning(f"File search rejected: {e}")
            return AuditResult(error_message=str(e), state=State.FAIL)

        base = os.path.normpath(os.path.abspath(self.boundary_path))
        matches = []
        try:
            for entry, info in self._walk(str(root)):
                if self._satisfies_filters(os.path.basename(entry), info):
                    matches.append(self._display_path(entry, base))
        except OSError as e:
            logger.info(f"File search under {root} failed: {e}")
            return AuditResult(error_message=str(e), state=State.FAIL)

        if self.count:
            return AuditResult(output=f"{len(matches)}\n")
        return AuditResult(output=''.join(f"{m}\n" for m in matches))

    @staticmethod
    def _walk(root: str) -> Iterator[Tuple[str, os.stat_result]]:
        """Yield the root and everything below it, in sorted order, without following links"""
        yield root, os.lstat(root)

        def raise_error(error):
            raise error

        for dirpath, dirnames, filenames in os.walk(root, onerror=raise_error):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                entry = os.path.join(dirpath, name)
                yield entry, os.lstat(entry)

    @staticmethod
    def _display_path(entry: str, base: str) -> str:
        rel = os.path.relpath(entry, base)
        return '/' if rel == '.' else '/' + rel

    def _satisfies_filters(self, name: str, info: os.stat_result) -> bool:
        if self.search_term:
            if self.search_type == SEARCH_EXACT:
                if name.lower() != self.search_term.lower():
                    return False
            elif not matches_term(name, self.search_term, self.search_type):
                return False

        if self.perm_mode is not None and not self._satisfies_permission(info.st_mode):
            return False

        if not self._satisfies_file_type(info.st_mode):
            return False

        if self.user_id is not None and info.st_uid != self.user_id:
            return False

        if self.group_id is not None and info.st_gid != self.group_id:
            return False

        return True

    def _satisfies_permission(self, mode: int) -> bool:
        bits = stat.S_IMODE(mode)
        if self.perm_mode == PERM_EXACT:
            return bits == self.perm
        if self.perm_mode == PERM_ANY_BITS:
            return bits & self.perm != 0
        return bits & self.perm == self.perm

    def _satisfies_file_type(self, mode: int) -> bool:
        if self.file_type == FILE_TYPE_DIRECTORY:
            return stat.S_ISDIR(mode)
        if self.file_type == FILE_TYPE_SYMLINK:
            return stat.S_ISLNK(mode)
        if self.file_type == FILE_TYPE_FILE:
            return stat.S_ISREG(mode)
        return True

    def __repr__(self) -> str:
        return f"FileSearchAudit({self.path!r})"
