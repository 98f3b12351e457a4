from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.ports import PolicySource
from .policy_loader import Format, read_policy_document

logger = logging.getLogger("tinyrbac.store")


@dataclass(frozen=True)
class _Fingerprint:
    inode: int
    size: int
    mtime_ns: int
    digest: str


class FilePolicySource(PolicySource):
    """Policy document in a local JSON or YAML file.

    The ETag is the SHA-256 of the file, or ``<sha>:<mtime_ns>`` with
    ``include_mtime_in_etag`` so that touching the file also counts as a change.
    The digest is only recomputed when inode, size or mtime move.
    """

    def __init__(
        self,
        path: str,
        *,
        fmt: Optional[Format] = None,
        validate_schema: bool = False,
        include_mtime_in_etag: bool = False,
    ) -> None:
        self.path = path
        self.fmt = fmt
        self.validate_schema = validate_schema
        self.include_mtime_in_etag = include_mtime_in_etag
        self._fingerprint: Optional[_Fingerprint] = None

    def _current(self) -> Optional[_Fingerprint]:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            self._fingerprint = None
            return None

        fp = self._fingerprint
        sig = (st.st_ino, st.st_size, st.st_mtime_ns)
        if fp is None or (fp.inode, fp.size, fp.mtime_ns) != sig:
            with open(self.path, "rb") as f:
                digest = hashlib.sha256(f.read()).hexdigest()
            fp = self._fingerprint = _Fingerprint(*sig, digest)
        return fp

    def etag(self) -> Optional[str]:
        fp = self._current()
        if fp is None:
            return None
        if self.include_mtime_in_etag:
            return f"{fp.digest}:{fp.mtime_ns}"
        return fp.digest

    def load(self) -> Dict[str, Any]:
        """Read and parse the file; failures surface as PolicyDecodeError."""
        document = read_policy_document(self.path, fmt=self.fmt)
        if self.validate_schema:
            from ..dsl.validate import validate_document

            try:
                validate_document(document)
            except Exception as e:
                logger.error("tinyrbac: schema validation failed for %s: %s", self.path, e)
                raise
        return document


__all__ = ["FilePolicySource"]
