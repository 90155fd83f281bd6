"""Discovery of the system timezone, used for all local-time calendar math"""

import os
import os.path
import platform
from typing import Literal, Optional

KEY: Literal[0] = 0
FILE: Literal[1] = 1

SystemTz = tuple[Literal[0, 1], str]

_LOCALTIME = "/etc/localtime"
_ZONEINFO_DIR = "zoneinfo"


def zone_key_from_path(path: str) -> Optional[str]:
    """The IANA key at the tail of a path inside a zoneinfo tree.

    >>> zone_key_from_path("/usr/share/zoneinfo/Europe/Paris")
    'Europe/Paris'
    >>> zone_key_from_path("/etc/my-zone") is None
    True
    """
    # covers variants such as `zoneinfo.default/`
    start = path.rfind(_ZONEINFO_DIR)
    if start == -1 or (slash := path.find("/", start)) == -1:
        return None
    return path[slash + 1 :] or None


if platform.system() in ("Linux", "Darwin"):  # pragma: no cover

    def _from_platform() -> SystemTz:
        target = os.path.realpath(_LOCALTIME)
        if target == _LOCALTIME:
            return (FILE, _LOCALTIME)
        key = zone_key_from_path(target)
        return (FILE, target) if key is None else (KEY, key)

else:  # pragma: no cover
    import tzlocal

    def _from_platform() -> SystemTz:
        return (KEY, tzlocal.get_localzone_name())


def get_tz() -> SystemTz:
    """Locate the system timezone as ``(KEY, name)`` or ``(FILE, path)``.

    A ``TZ`` environment variable wins over the platform setting. Its
    optional leading colon is dropped, and absolute values denote a TZif file.
    """
    value = os.environ.get("TZ")
    if value is None:  # pragma: no cover
        return _from_platform()
    value = value.removeprefix(":")
    return (FILE, value) if os.path.isabs(value) else (KEY, value)
