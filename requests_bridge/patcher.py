# requests_bridge/patcher.py
"""
Injects the Requests bridge <script> tag into the Jellyfin web client's index.html.

The candidate table lists the known install locations of the web client across
Docker images and native installs. The first candidate that exists, is writable
and either already carries the block or accepts it wins.
"""

import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

logger = logging.getLogger("requests_bridge.patcher")

SCRIPT_URL = "/plugins/requests/assets/requests-implementation.js"
MARKER_START = "<!-- REQUESTS_BRIDGE_JS_START -->"
MARKER_END = "<!-- REQUESTS_BRIDGE_JS_END -->"

SCRIPT_BLOCK = f'\n{MARKER_START}\n<script src="{SCRIPT_URL}" defer></script>\n{MARKER_END}\n'

INDEX_PATHS = (
    # binhex-jellyfin
    "/usr/share/jellyfin/web/index.html",
    # linuxserver/jellyfin
    "/usr/lib/jellyfin/bin/jellyfin-web/index.html",
    # official jellyfin image
    "/usr/share/webapps/jellyfin/web/index.html",
    # native linux package
    "/usr/share/jellyfin-web/index.html",
    # windows
    r"C:\Program Files\Jellyfin\Server\jellyfin-web\index.html",
    r"C:\ProgramData\Jellyfin\Server\jellyfin-web\index.html",
)

_HEAD_OPEN = re.compile(re.escape("<head>"), re.IGNORECASE)
_BODY_CLOSE = re.compile(re.escape("</body>"), re.IGNORECASE)


class CandidateStatus(str, enum.Enum):
    PATCHED = "patched"
    ALREADY_PATCHED = "already_patched"
    NOT_FOUND = "not_found"
    NOT_WRITABLE = "not_writable"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class CandidateResult:
    path: Path
    status: CandidateStatus
    detail: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status in (CandidateStatus.PATCHED, CandidateStatus.ALREADY_PATCHED)


def is_writable(path) -> bool:
    """Probe write access by opening read-write and closing straight away."""
    try:
        with open(path, "r+b"):
            return True
    except OSError:
        return False


def contains_ignore_case(text: str, needle: str) -> bool:
    return re.search(re.escape(needle), text, re.IGNORECASE) is not None


def is_patched(html: str) -> bool:
    return contains_ignore_case(html, MARKER_START) and contains_ignore_case(html, SCRIPT_URL)


def insert_block(html: str, block: str = SCRIPT_BLOCK) -> str:
    """
    Place the block right after <head>, else right before </body>, else at the end.
    Both anchors are matched case-insensitively; offsets refer to the original text.
    """
    head = _HEAD_OPEN.search(html)
    if head:
        return html[: head.end()] + block + html[head.end():]
    body_end = _BODY_CLOSE.search(html)
    if body_end:
        return html[: body_end.start()] + block + html[body_end.start():]
    return html + block


def read_index(path: Path) -> str:
    # utf-8-sig drops a BOM if present; newline="" keeps CRLF files intact
    with open(path, "r", encoding="utf-8-sig", newline="") as fh:
        return fh.read()


def write_index(path: Path, text: str) -> None:
    # written in place: bind-mounted single files cannot be replaced by rename
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)


def patch_file(path, probe: Callable[[Path], bool] = is_writable) -> CandidateResult:
    path = Path(path)
    try:
        if not path.is_file():
            return CandidateResult(path, CandidateStatus.NOT_FOUND)

        if not probe(path):
            logger.debug("%s is not writable (permissions or read-only mount)", path)
            return CandidateResult(path, CandidateStatus.NOT_WRITABLE)

        html = read_index(path)
        if is_patched(html):
            logger.debug("Script already present in %s", path)
            return CandidateResult(path, CandidateStatus.ALREADY_PATCHED)

        write_index(path, insert_block(html))
    except PermissionError as e:
        return CandidateResult(path, CandidateStatus.NOT_WRITABLE, str(e))
    except (OSError, UnicodeError) as e:
        logger.debug("Failed to patch %s", path, exc_info=True)
        return CandidateResult(path, CandidateStatus.IO_ERROR, str(e))

    logger.info("Script tag inserted into %s", path)
    return CandidateResult(path, CandidateStatus.PATCHED)


def locate_and_patch(
    candidates: Iterable = INDEX_PATHS,
    probe: Callable[[Path], bool] = is_writable,
) -> Optional[Path]:
    """Try every candidate in order; return the first patched (or already patched) path."""
    for candidate in candidates:
        result = patch_file(candidate, probe=probe)
        if result.found:
            return result.path
    return None
