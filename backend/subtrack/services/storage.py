"""
Report Storage - writes uploaded PDFs under the upload directory.

Stored names are "<uuid hex>-<original name>" with whitespace replaced by
underscores, and are served back at /uploads/<name>. Long client names are
cut down so the stored name fits in one filesystem path component.
"""

import os
import re
import uuid
from pathlib import Path

from subtrack.logging_config import get_logger, log_with_context

logger = get_logger("lifecycle")

PDF_SIGNATURE = b"%PDF-"
PUBLIC_PREFIX = "/uploads/"

# NAME_MAX on the usual Linux filesystems, in bytes
MAX_NAME_BYTES = 255
MAX_EXTENSION_BYTES = 16


def _truncate_utf8(text: str, max_bytes: int) -> str:
    return text.encode("utf-8")[:max_bytes].decode("utf-8", "ignore")


def safe_filename(original: str) -> str:
    """Unique, whitespace-free file name that cannot escape the upload dir."""
    base = os.path.basename((original or "").replace("\\", "/")) or "report.pdf"
    base = re.sub(r"\s+", "_", base)

    prefix = "{}-".format(uuid.uuid4().hex)
    stem, ext = os.path.splitext(base)
    if len(ext.encode("utf-8")) > MAX_EXTENSION_BYTES:
        stem, ext = base, ""
    budget = MAX_NAME_BYTES - len(prefix) - len(ext.encode("utf-8"))
    return prefix + _truncate_utf8(stem, budget) + ext


class ReportStorage:

    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, original_name: str, content: bytes) -> str:
        """Write content and return its public path."""
        name = safe_filename(original_name)
        (self.root / name).write_bytes(content)
        log_with_context(logger, "DEBUG", "Stored report {}".format(name),
                         extra_data={"bytes": len(content)})
        return PUBLIC_PREFIX + name

    def local_path(self, public_path: str) -> Path:
        return self.root / public_path[len(PUBLIC_PREFIX):]

    def is_pdf(self, public_path: str) -> bool:
        """Check the leading signature bytes of a stored file."""
        with open(self.local_path(public_path), "rb") as fh:
            return fh.read(len(PDF_SIGNATURE)) == PDF_SIGNATURE

    def discard(self, public_path: str):
        path = self.local_path(public_path)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        log_with_context(logger, "INFO", "Discarded stored file {}".format(path.name))
