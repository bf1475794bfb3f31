"""Text search audit"""

import logging
import os
import stat

from benchaudit.models import AuditResult, State
from benchaudit.security import SecurityError, ensure_link_within, sanitize_path, sanitize_pattern
from benchaudit.audit.base import Auditer
from benchaudit.audit.search import SEARCH_CONTAINS, as_bool, matches_term, normalize_args

logger = logging.getLogger(__name__)


class TextSearchAudit(Auditer):
    """Outputs the lines of a file holding a word that matches the search term"""

    def __init__(self, path: str, boundary_path: str = '/', search_term: str = '',
                 search_type: str = SEARCH_CONTAINS, count: bool = False):
        self.path = path or ''
        self.boundary_path = boundary_path
        self.search_term = sanitize_pattern(search_term or '')
        self.search_type = search_type or SEARCH_CONTAINS
        self.count = count

    @classmethod
    def from_payload(cls, payload, boundary_path: str = '/') -> 'TextSearchAudit':
        args = normalize_args(payload)
        return cls(
            path=str(args.get('path', '')),
            boundary_path=boundary_path,
            search_term=str(args.get('search_term', '')),
            search_type=str(args.get('search_type', SEARCH_CONTAINS)),
            count=as_bool(args.get('count', False)),
        )

    def describe(self) -> str:
        return f"text_search {self.path} {self.search_term}"

    def execute(self, *custom_configs) -> AuditResult:
        try:
            target = sanitize_path(self.path, self.boundary_path)
            info = os.lstat(target)
            if stat.S_ISLNK(info.st_mode):
                target = ensure_link_within(target, self.boundary_path)
                info = os.stat(target)
            if not stat.S_ISREG(info.st_mode):
                return self._fail(f"invalid file {target}")

            matched = []
            with open(target, 'r', encoding='utf-8', errors='replace') as f:
                for line in f:
                    line = line.rstrip('\n')
                    if any(matches_term(word, self.search_term, self.search_type)
                           for word in line.split()):
                        matched.append(line)
        except (SecurityError, OSError) as e:
            return self._fail(str(e))

        if not matched:
            return self._fail("no results found")

        if self.count:
            return AuditResult(output=f"{len(matched)}\n")
        return AuditResult(output=''.join(f"{line}\n" for line in matched))

    def _fail(self, message: str) -> AuditResult:
        logger.info(f"Text search in {self.path} failed: {message}")
        return AuditResult(error_message=message, state=State.FAIL)

    def __repr__(self) -> str:
        return f"TextSearchAudit({self.path!r}, {self.search_term!r})"
