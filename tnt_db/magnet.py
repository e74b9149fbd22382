from __future__ import annotations

from typing import Tuple
from urllib.parse import quote_plus

from .records import ItemRecord

MAGNET_PREFIX = "magnet:?xt=urn:btih:"

# Order matters for byte-for-byte reproducible output.
TRACKERS: Tuple[str, ...] = (
    "http://tracker.tntvillage.scambioetico.org:2710/announce",
    "udp://tracker.tntvillage.scambioetico.org:2710/announce",
    "udp://tracker.coppersurfer.tk:6969/announce",
    "udp://tracker.leechers-paradise.org:6969/announce",
    "udp://IPv6.leechers-paradise.org:6969/announce",
    "udp://tracker.internetwarriors.net:1337/announce",
    "udp://tracker.tiny-vps.com:6969/announce",
    "udp://tracker.mg64.net:2710/announce",
    "udp://tracker.openbittorrent.com:80/announce",
)

_TRACKER_SUFFIX = "".join(f"&tr={tracker}" for tracker in TRACKERS)


def display_name(item: ItemRecord) -> str:
    """Form-encoded ``title-author`` used as the magnet ``dn`` parameter."""

    # ( ) ! * are left unescaped, as HttpUtility.UrlEncode leaves them.
    return quote_plus(f"{item.title}-{item.author}", safe="()!*")


def build_magnet_uri(item: ItemRecord) -> str:
    return f"{MAGNET_PREFIX}{item.hash}&dn={display_name(item)}{_TRACKER_SUFFIX}"
