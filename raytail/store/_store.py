from __future__ import annotations

import datetime as dt
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from ..notify import ChangeNotifier, Listener
from ..payloads import (
    NOOP_TYPES,
    ColorContent,
    ContentError,
    LabelContent,
    NewScreenContent,
    SizeContent,
    parse_content,
)
from .types import RayMeta, RayPayload, RayRequest, StoredPayload

logger = logging.getLogger(__name__)

MAX_PAYLOADS = 1000
DEFAULT_SCREEN = "default"


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class PayloadStore:
    """Bounded, mutable history of Ray payloads.

    Every request is applied under one re-entrant lock, so concurrent HTTP
    handler threads never interleave mid-request and readers always see
    whole requests. Subscribers are notified once per request, still under
    the lock, which lets them re-query but makes the next request wait for
    the fan-out.
    """

    def __init__(
        self,
        max_payloads: int = MAX_PAYLOADS,
        *,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        if max_payloads < 1:
            raise ValueError(f"max_payloads must be at least 1, got {max_payloads}")
        self.max_payloads = max_payloads
        self.notifier = notifier or ChangeNotifier()
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._payloads: list[StoredPayload] = []
        self._current_screen = DEFAULT_SCREEN
        self._counter = 0

    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    @contextmanager
    def subscription(self, listener: Listener) -> Iterator[None]:
        with self.notifier.subscription(listener):
            yield

    # Mutations

    def add_request(self, request: RayRequest) -> None:
        with self._lock:
            timestamp = self._clock()
            for payload in request.payloads:
                self._process_payload(request.uuid, payload, request.meta, timestamp)
            if len(self._payloads) > self.max_payloads:
                del self._payloads[: len(self._payloads) - self.max_payloads]
            self.notifier.notify()

    def clear(self) -> None:
        with self._lock:
            self._payloads = []
            self.notifier.notify()

    def _process_payload(
        self,
        uuid: str,
        payload: RayPayload,
        meta: RayMeta | None,
        timestamp: dt.datetime,
    ) -> None:
        payload_type = payload.type
        try:
            content = parse_content(payload_type, payload.content)
        except ContentError as exc:
            logger.debug("skipping %s payload for %s: %s", payload_type, uuid, exc)
            return

        if isinstance(content, ColorContent):
            self._apply_to_latest(uuid, lambda p: setattr(p, "color", content.color))
            return
        if isinstance(content, LabelContent):
            self._apply_to_latest(uuid, lambda p: setattr(p, "label", content.label))
            return
        if isinstance(content, SizeContent):
            self._apply_to_latest(uuid, lambda p: setattr(p, "size", content.size))
            return
        if isinstance(content, NewScreenContent):
            self._current_screen = content.name
            return
        if payload_type == "clear_all":
            self._payloads = []
            return
        if payload_type == "hide":
            self._apply_to_latest(uuid, lambda p: setattr(p, "hidden", True))
            return
        if payload_type == "remove":
            self._payloads = [p for p in self._payloads if p.uuid != uuid]
            return
        if payload_type in NOOP_TYPES:
            logger.debug("ignoring %s payload for %s", payload_type, uuid)
            return

        self._counter += 1
        self._payloads.append(
            StoredPayload(
                id=self._counter,
                uuid=uuid,
                type=payload_type,
                content=content,
                timestamp=timestamp,
                screen=self._current_screen,
                origin=payload.origin,
                meta=meta,
            )
        )

    def _apply_to_latest(self, uuid: str, modifier: Callable[[StoredPayload], None]) -> None:
        for stored in reversed(self._payloads):
            if stored.uuid == uuid:
                modifier(stored)
                return

    # Reads

    def get_payloads(self) -> list[StoredPayload]:
        with self._lock:
            return [p for p in self._payloads if not p.hidden]

    def get_all_payloads(self) -> list[StoredPayload]:
        with self._lock:
            return list(self._payloads)

    def get_payloads_by_screen(self, screen: str) -> list[StoredPayload]:
        with self._lock:
            return [p for p in self._payloads if p.screen == screen and not p.hidden]

    def get_current_screen(self) -> str:
        with self._lock:
            return self._current_screen

    def get_payload_by_id(self, payload_id: int) -> StoredPayload | None:
        with self._lock:
            for stored in self._payloads:
                if stored.id == payload_id:
                    return stored
        return None

    def get_screens(self) -> list[str]:
        with self._lock:
            return list(dict.fromkeys(p.screen for p in self._payloads if p.screen))

    def count(self) -> int:
        with self._lock:
            return len(self._payloads)
