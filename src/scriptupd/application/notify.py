"""Notification eligibility of update results."""

from scriptupd.domain.protocols import OptionStore
from scriptupd.domain.types import Script


def can_notify(script: Script, options: OptionStore) -> bool:
    """
    Whether update results of ``script`` should be shown to the user.

    With ``notify_updates_global`` on, the global ``notify_updates`` option
    applies to every script. Otherwise the script's own setting wins and the
    global option is only the fallback for scripts that have none.
    """
    allowed = bool(options.get_option("notify_updates"))
    if options.get_option("notify_updates_global"):
        return allowed
    own = script.config.notify_updates
    return allowed if own is None else bool(own)
