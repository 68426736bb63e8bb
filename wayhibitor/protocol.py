"""Descriptions of the interfaces the inhibitor speaks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Request:
    """A request an interface accepts, with its argument signature."""

    name: str
    signature: str = ""
    new_interface: str | None = None
    destructor: bool = False
    since: int = 1


@dataclass(frozen=True)
class Interface:
    """A protocol interface: its name, version, requests and event names."""

    name: str
    version: int
    requests: tuple[Request, ...] = ()
    events: tuple[str, ...] = ()

    def opcode(self, name: str) -> int:
        """The opcode of the request called name."""
        for index, request in enumerate(self.requests):
            if request.name == name:
                return index
        raise KeyError(f"{self.name} has no request {name!r}")

    def request(self, name: str) -> Request:
        return self.requests[self.opcode(name)]


WL_DISPLAY = Interface(
    "wl_display",
    1,
    (
        Request("sync", "n", "wl_callback"),
        Request("get_registry", "n", "wl_registry"),
    ),
    ("error", "delete_id"),
)

WL_REGISTRY = Interface(
    "wl_registry",
    1,
    (Request("bind", "usun"),),
    ("global", "global_remove"),
)

WL_CALLBACK = Interface("wl_callback", 1, (), ("done",))

WL_COMPOSITOR = Interface(
    "wl_compositor",
    6,
    (
        Request("create_surface", "n", "wl_surface"),
        Request("create_region", "n", "wl_region"),
    ),
)

WL_SURFACE = Interface(
    "wl_surface",
    6,
    (
        Request("destroy", destructor=True),
        Request("attach", "?oii"),
        Request("damage", "iiii"),
        Request("frame", "n", "wl_callback"),
        Request("set_opaque_region", "?o"),
        Request("set_input_region", "?o"),
        Request("commit"),
        Request("set_buffer_transform", "i", since=2),
        Request("set_buffer_scale", "i", since=3),
        Request("damage_buffer", "iiii", since=4),
        Request("offset", "ii", since=5),
    ),
    ("enter", "leave", "preferred_buffer_scale", "preferred_buffer_transform"),
)

ZWP_IDLE_INHIBIT_MANAGER_V1 = Interface(
    "zwp_idle_inhibit_manager_v1",
    1,
    (
        Request("destroy", destructor=True),
        Request("create_inhibitor", "no", "zwp_idle_inhibitor_v1"),
    ),
)

ZWP_IDLE_INHIBITOR_V1 = Interface(
    "zwp_idle_inhibitor_v1",
    1,
    (Request("destroy", destructor=True),),
)