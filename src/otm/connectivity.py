"""Online/offline signal used to trigger upload retries."""

import logging
from typing import Callable, List

import requests

logger = logging.getLogger(__name__)


class ConnectivitySignal:
    """
    Boolean connectivity state with "connection restored" notifications.

    Subscribers are called once per offline -> online transition, in
    subscription order. A failing subscriber is logged and does not prevent
    the others from running.
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._subscribers: List[Callable[[], None]] = []

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._subscribers.append(callback)

    def set_online(self, online: bool) -> None:
        """Update the state, notifying subscribers when connectivity comes back."""
        was_online = self._online
        self._online = online

        if online and not was_online:
            logger.info("Connectivity restored")
            for callback in list(self._subscribers):
                try:
                    callback()
                except Exception as e:
                    logger.error(f"Connectivity subscriber failed: {str(e)}", exc_info=True)
        elif not online and was_online:
            logger.info("Connectivity lost")

    def refresh(self, url: str, timeout: float = 5) -> bool:
        """
        Probe a URL and update the state from the outcome.

        Any HTTP answer counts as online; only transport failures count as offline.
        """
        try:
            requests.head(url, timeout=timeout, allow_redirects=True)
            online = True
        except requests.RequestException as e:
            logger.warning(f"Connectivity probe failed: {e}")
            online = False

        self.set_online(online)
        return online
