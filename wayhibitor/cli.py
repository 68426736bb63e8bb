"""Command that keeps the Wayland session from idling while it runs."""

from __future__ import annotations

import argparse
import contextlib
import signal
import sys

from .client import Display, DisplayError, connect
from .protocol import (
    WL_COMPOSITOR,
    WL_REGISTRY,
    WL_SURFACE,
    ZWP_IDLE_INHIBIT_MANAGER_V1,
    ZWP_IDLE_INHIBITOR_V1,
)
from .wire import WireError, pack_uint, unpack_string, unpack_uint

COMPOSITOR_VERSION = 6
MANAGER_VERSION = 1
_EVENT_GLOBAL = WL_REGISTRY.events.index("global")


class _Terminated(BaseException):
    """Raised from the signal handler to leave the event loop."""


class IdleInhibitor:
    """Holds an idle inhibitor on a bare surface for as long as it runs."""

    def __init__(self, display: Display) -> None:
        self.display = display
        self.registry: int | None = None
        self.compositor: int | None = None
        self.surface: int | None = None
        self.manager: int | None = None
        self.inhibitor: int | None = None

    def handle_global(self, name: int, interface: str, version: int) -> None:
        """Bind the compositor and the idle-inhibit manager when they are announced."""
        if self.registry is None:
            raise RuntimeError("the registry has not been requested")
        if interface == WL_COMPOSITOR.name:
            self.compositor = self.display.bind(self.registry, name, WL_COMPOSITOR, COMPOSITOR_VERSION)
            self.surface = self.display.new_id()
            self.display.send(self.compositor, WL_COMPOSITOR, "create_surface", pack_uint(self.surface))
        elif interface == ZWP_IDLE_INHIBIT_MANAGER_V1.name:
            self.manager = self.display.bind(
                self.registry, name, ZWP_IDLE_INHIBIT_MANAGER_V1, MANAGER_VERSION
            )

    def _on_registry_event(self, opcode: int, payload: bytes) -> None:
        if opcode != _EVENT_GLOBAL:
            return
        try:
            name, offset = unpack_uint(payload, 0)
            interface, offset = unpack_string(payload, offset)
            version, _ = unpack_uint(payload, offset)
        except WireError as exc:
            raise DisplayError(f"malformed registry event: {exc}") from exc
        self.handle_global(name, interface or "", version)

    def setup(self) -> None:
        """Fetch the registry and bind the globals it announces."""
        self.registry = self.display.get_registry()
        self.display.on_event(self.registry, self._on_registry_event)
        self.display.dispatch()
        self.display.roundtrip()

    def inhibit(self) -> None:
        if self.manager is None:
            raise DisplayError(
                "The compositor doesn't support the idle_inhibit_unstable_v1 protocol"
            )
        if self.surface is None:
            raise DisplayError("The compositor offers no wl_compositor")
        self.inhibitor = self.display.new_id()
        self.display.send(
            self.manager,
            ZWP_IDLE_INHIBIT_MANAGER_V1,
            "create_inhibitor",
            pack_uint(self.inhibitor) + pack_uint(self.surface),
        )

    def run(self) -> None:
        """Dispatch events until the connection ends."""
        while self.display.dispatch():
            pass

    def cleanup(self) -> None:
        """Destroy every object created and close the connection."""
        for attribute, interface in (
            ("inhibitor", ZWP_IDLE_INHIBITOR_V1),
            ("manager", ZWP_IDLE_INHIBIT_MANAGER_V1),
            ("surface", WL_SURFACE),
        ):
            object_id = getattr(self, attribute)
            if object_id is not None:
                with contextlib.suppress(DisplayError):
                    self.display.send(object_id, interface, "destroy")
                setattr(self, attribute, None)
        self.compositor = None
        self.display.close()


def _terminate(signum, frame) -> None:
    raise _Terminated


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="wayhibitor",
        description="Keep the Wayland session from going idle while running.",
    )
    parser.parse_args(argv)

    try:
        display = connect()
    except DisplayError:
        print("Failed to connect to wayland display", file=sys.stderr)
        return 1

    inhibitor = IdleInhibitor(display)
    previous = {}
    try:
        inhibitor.setup()
        for signum in (signal.SIGTERM, signal.SIGINT):
            previous[signum] = signal.signal(signum, _terminate)
        inhibitor.inhibit()
        inhibitor.run()
    except _Terminated:
        return 0
    except DisplayError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        inhibitor.cleanup()
        for signum, handler in previous.items():
            signal.signal(signum, handler)
    return 0