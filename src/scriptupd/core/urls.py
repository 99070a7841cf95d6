"""Update URL selection for installed scripts."""

import ipaddress
from typing import Optional
from urllib.parse import urlsplit

from scriptupd.domain.types import Script, UpdateUrls

_LOCAL_HOSTS = {"localhost", ""}


def try_url(url: Optional[str]) -> Optional[str]:
    """Return ``url`` if it parses as a URL, otherwise None."""
    if not url:
        return None
    try:
        # port raises too, for a non-numeric or out-of-range port
        urlsplit(url).port
    except ValueError:
        return None
    return url


def is_remote(url: Optional[str]) -> bool:
    """True for http(s) URLs that do not point at the local machine."""
    if not try_url(url):
        return False
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return False
    host = (parts.hostname or "").lower()
    if host in _LOCAL_HOSTS or host.endswith(".localhost"):
        return False
    try:
        return not ipaddress.ip_address(host).is_loopback
    except ValueError:
        return True


def get_script_update_urls(
    script: Script, *, enabled_only: bool = False, auto: bool = False
) -> Optional[UpdateUrls]:
    """
    Return the download and update URLs of ``script``, or None if it cannot be checked.

    User overrides win over the metadata block. The download URL falls back to
    the URL the script was installed from, and the update URL falls back to the
    download URL.

    Args:
        script: The installed script
        enabled_only: Skip disabled scripts
        auto: Skip scripts whose automatic updates are turned off
    """
    if enabled_only and not script.config.enabled:
        return None
    if auto and not script.config.should_update:
        return None
    custom, meta = script.custom, script.meta
    download_url = try_url(custom.download_url) or try_url(meta.download_url) or try_url(custom.last_install_url)
    update_url = try_url(custom.update_url) or try_url(meta.update_url) or download_url
    if is_remote(download_url or update_url):
        return UpdateUrls(download_url, update_url)
    return None
