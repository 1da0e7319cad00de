"""
Enumeration of every capture stored on the meter.

The meter files captures under titles. The walk is:

    MI                      -> number of titles
    GTtttt                  -> name and capture count of title tttt
    GAtttt,cccc             -> global id of capture cccc of title tttt
    MRgggg                  -> the capture itself

Titles and captures are visited in ascending order. Global ids are only used as
keys; they are not assumed to be contiguous or ordered.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from . import commands
from .errors import DuplicateCaptureError
from .protocol import DeviceSession, fetch_capture_info, fetch_global_id
from .records import CaptureInfo, StorageInfo, TitleInfo, decode_storage_info, decode_title_info


@dataclass(frozen=True, eq=False)
class CaptureEntry:
    """One capture of the index and where it lives on the meter."""
    capture: CaptureInfo
    local_capture_id: int
    title_id: int


class CaptureIndex(Mapping):
    """
    Read-only, ordered ``global_id -> CaptureEntry`` mapping.

    Iteration follows the order the captures were enumerated in (title, then
    capture within the title), not the numeric order of the global ids.
    """

    def __init__(self, storage: StorageInfo, titles: Dict[int, TitleInfo], entries: Dict[int, CaptureEntry]):
        self.storage = storage
        self._titles = dict(titles)
        self._entries = dict(entries)

    def __getitem__(self, global_id: int) -> CaptureEntry:
        return self._entries[global_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CaptureIndex({len(self._titles)} titles, {len(self._entries)} captures)"

    @property
    def titles(self) -> Dict[int, TitleInfo]:
        """Title infos read while building the index, keyed by 1-based title id."""
        return dict(self._titles)

    def title_name(self, global_id: int) -> str:
        return self._titles[self._entries[global_id].title_id].name

    def locations(self) -> List[Tuple[int, int]]:
        """Every visited ``(title_id, local_capture_id)`` pair, in enumeration order."""
        return [(e.title_id, e.local_capture_id) for e in self._entries.values()]

    def captures_in_title(self, title_id: int) -> List[int]:
        """Global ids filed under a title, ordered by local capture id."""
        return [gid for gid, e in self._entries.items() if e.title_id == title_id]


def read_storage_info(session: DeviceSession) -> StorageInfo:
    return decode_storage_info(session.execute(commands.storage_info()))


def read_title_info(session: DeviceSession, title_id: int) -> TitleInfo:
    return decode_title_info(session.execute(commands.title_info(title_id)))


def build_capture_index(session: DeviceSession, storage: Optional[StorageInfo] = None) -> CaptureIndex:
    """
    Walk titles and captures and decode every capture on the meter.

    Args:
        session: Session owning the transport. Used strictly sequentially.
        storage: Storage info if it was already read this session; ``MI`` is
            sent otherwise.

    Returns:
        The complete index. A failure anywhere aborts the walk and propagates,
        no partial index is ever returned.

    Raises:
        DuplicateCaptureError: Two captures reported the same global id.
        SekonicError: Any transaction or decode failure.
    """
    if storage is None:
        storage = read_storage_info(session)
    if session.verbose:
        print(f"Storage: {storage.num_titles} titles, {storage.num_captures} captures")

    titles: Dict[int, TitleInfo] = {}
    entries: Dict[int, CaptureEntry] = {}

    for title_id in range(1, storage.num_titles + 1):
        title = read_title_info(session, title_id)
        titles[title_id] = title
        if session.verbose:
            print(f"Title {title_id} '{title.name}': {title.num_captures} captures")

        for local_id in range(1, title.num_captures + 1):
            global_id = fetch_global_id(session, title_id, local_id)
            if global_id in entries:
                previous = entries[global_id]
                raise DuplicateCaptureError(
                    global_id,
                    (previous.title_id, previous.local_capture_id),
                    (title_id, local_id),
                )
            capture = fetch_capture_info(session, global_id)
            entries[global_id] = CaptureEntry(capture=capture, local_capture_id=local_id, title_id=title_id)

    total = sum(t.num_captures for t in titles.values())
    if session.verbose and total != storage.num_captures:
        print(f"Warning: titles hold {total} captures, storage info reports {storage.num_captures}")

    return CaptureIndex(storage, titles, entries)
