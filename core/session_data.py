"""
Session attribute extraction.

Turns a connection snapshot into the structured attributes saved with a
new session: browser, operating system, device, client IP, landing page
and UTM campaign parameters. Parsing is pure; anything that cannot be
detected comes back as ``None``.
"""

import ipaddress
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from user_agents import parse as ua_parse
from user_agents.parsers import UserAgent

from core.connection import ConnectionSnapshot, RemoteAddress

logger = logging.getLogger(__name__)


UTM_PARAM_KEYS = (
    "utm_campaign",
    "utm_content",
    "utm_medium",
    "utm_source",
    "utm_term",
)

# user-agents OS family -> platform tag
_PLATFORMS: Dict[str, str] = {
    "Mac OS X": "mac",
    "Mac OS": "mac",
    "iOS": "ios",
    "Android": "android",
    "Windows": "windows",
    "Windows Phone": "windows_phone",
    "Chrome OS": "chrome_os",
    "BlackBerry OS": "blackberry",
    "Linux": "linux",
    "Ubuntu": "linux",
    "Debian": "linux",
    "Fedora": "linux",
}

_WINDOWS_NT_NAMES: Dict[str, str] = {
    "10.0": "10",
    "6.3": "8.1",
    "6.2": "8",
    "6.1": "7",
    "6.0": "Vista",
    "5.2": "XP",
    "5.1": "XP",
    "5.0": "2000",
}

_WINDOWS_NT_RE = re.compile(r"Windows NT (\d+\.\d+)")


@dataclass(frozen=True)
class SessionAttributes:
    """Attributes describing the client that opened a session."""

    browser: Optional[str] = None
    browser_version: Optional[str] = None
    device_type: Optional[str] = None
    ip: Optional[str] = None
    landing_page: Optional[str] = None
    os: Optional[str] = None
    os_version: Optional[str] = None
    user_agent: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_source: Optional[str] = None
    utm_term: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def parse(snapshot: ConnectionSnapshot) -> SessionAttributes:
    """Return the session attributes for ``snapshot``."""
    user_agent = snapshot.user_agent
    ua = ua_parse(user_agent) if user_agent else None
    os_name = platform(ua)

    derived = {
        "browser": browser_name(ua),
        "browser_version": browser_version(ua),
        "device_type": device_type(ua),
        "ip": format_ip(snapshot.remote_ip),
        "landing_page": snapshot.path,
        "os": os_name,
        "os_version": os_version(os_name, ua),
        "user_agent": user_agent,
    }
    return SessionAttributes(**{**utm_params(snapshot.query_params), **derived})


def build_session_data(snapshot: ConnectionSnapshot, properties: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Parsed attributes plus caller-supplied extras under ``properties``."""
    data: Dict[str, Any] = parse(snapshot).to_dict()
    data["properties"] = dict(properties or {})
    return data


def utm_params(query_params: Mapping[Any, Any]) -> Dict[str, str]:
    """Keep only the recognised UTM parameters."""
    params = {str(key): value for key, value in query_params.items()}
    return {key: params[key] for key in UTM_PARAM_KEYS if key in params}


def browser_name(ua: Optional[UserAgent]) -> Optional[str]:
    if ua is None or ua.browser.family in ("", "Other"):
        return None
    return ua.browser.family


def browser_version(ua: Optional[UserAgent]) -> Optional[str]:
    if ua is None or not ua.browser.version:
        return None
    return str(ua.browser.version[0])


def device_type(ua: Optional[UserAgent]) -> Optional[str]:
    if ua is None:
        return None
    if ua.is_bot:
        return "bot"
    if ua.is_tablet:
        return "tablet"
    if ua.is_mobile:
        return "mobile"
    if ua.is_pc:
        return "desktop"
    return "unknown"


def platform(ua: Optional[UserAgent]) -> Optional[str]:
    if ua is None:
        return None
    family = ua.os.family or ""
    if family in _PLATFORMS:
        return _PLATFORMS[family]
    # older ua-parser releases report e.g. "Windows 10" as the family
    if family.startswith("Windows") and "Phone" not in family:
        return "windows"
    return "other"


def _dotted_version(ua: UserAgent) -> Optional[str]:
    return ua.os.version_string or None


def _windows_version(ua: UserAgent) -> Optional[str]:
    match = _WINDOWS_NT_RE.search(ua.ua_string)
    if match and match.group(1) in _WINDOWS_NT_NAMES:
        return _WINDOWS_NT_NAMES[match.group(1)]
    if ua.os.version_string:
        return ua.os.version_string
    suffix = ua.os.family[len("Windows"):].strip()
    return suffix or None


_OS_VERSION_EXTRACTORS: Dict[str, Callable[[UserAgent], Optional[str]]] = {
    "mac": _dotted_version,
    "ios": _dotted_version,
    "android": _dotted_version,
    "windows": _windows_version,
}


def os_version(os_name: Optional[str], ua: Optional[UserAgent]) -> Optional[str]:
    extractor = _OS_VERSION_EXTRACTORS.get(os_name) if os_name else None
    if extractor is None or ua is None:
        return None
    return extractor(ua)


def format_ip(remote_ip: Optional[RemoteAddress]) -> Optional[str]:
    """Render a remote address as text.

    Accepts 4-tuples (IPv4), 8-tuples of 16-bit groups (IPv6) and address
    strings. Anything else is treated as undetectable.
    """
    if remote_ip is None:
        return None

    try:
        if isinstance(remote_ip, str):
            return str(ipaddress.ip_address(remote_ip))
        parts = tuple(remote_ip)
        if len(parts) == 4:
            return str(ipaddress.IPv4Address(".".join(str(int(p)) for p in parts)))
        if len(parts) == 8:
            value = 0
            for group in parts:
                group = int(group)
                if not 0 <= group <= 0xFFFF:
                    raise ValueError(f"IPv6 group out of range: {group}")
                value = (value << 16) | group
            return str(ipaddress.IPv6Address(value))
    except (TypeError, ValueError) as exc:
        logger.debug("Ignoring malformed remote address %r: %s", remote_ip, exc)
        return None

    logger.debug("Ignoring remote address with %d components: %r", len(parts), remote_ip)
    return None
