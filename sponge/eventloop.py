"""Waiting for readiness on file descriptors and running callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple

from .file_descriptor import FileDescriptor
from .util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """The outcome of one call to :meth:`EventLoop.wait_next_event`."""

    SUCCESS = auto()
    TIMEOUT = auto()
    EXIT = auto()


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Callback

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count
        return self.fd.write_count


class EventLoop:
    """Polls a set of rules and runs the callback of each one whose descriptor is ready.

    A rule is dropped (and its ``cancel`` callback run) when its descriptor is
    closed, reaches EOF while waiting for input, or hangs up.
    """

    def __init__(self) -> None:
        self._rules: List[_Rule] = []

    def __len__(self) -> int:
        return len(self._rules)

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` is true."""
        self._rules.append(
            _Rule(
                fd.duplicate(),
                Direction(direction),
                callback,
                interest if interest is not None else _always,
                cancel if cancel is not None else _nothing,
            )
        )

    def _cancel(self, rule: _Rule) -> None:
        rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once, up to ``timeout_ms`` milliseconds, and run the ready callbacks.

        Raises RuntimeError on an error reported for a polled descriptor, or when a
        callback neither read nor wrote its descriptor yet is still interested.
        """
        polled: List[Tuple[_Rule, int]] = []
        for rule in list(self._rules):
            if rule.direction is Direction.IN and rule.fd.eof:
                self._cancel(rule)
                continue
            if rule.fd.closed:
                self._cancel(rule)
                continue
            polled.append((rule, rule.direction.value if rule.interest() else 0))

        if not any(events for _, events in polled):
            return Result.EXIT

        masks: Dict[int, int] = {}
        for rule, events in polled:
            masks[rule.fd.fd_num] = masks.get(rule.fd.fd_num, 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.EXIT
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc
        if not ready:
            return Result.TIMEOUT
        revents_by_fd = dict(ready)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num, 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # the only condition was a hangup: this descriptor is defunct
                self._cancel(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return Result.SUCCESS