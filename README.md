# wayhibitor

`wayhibitor` keeps your Wayland session from going idle. While it runs, the
compositor does not blank the screen, lock the session or start a
screensaver.

It speaks the Wayland wire protocol directly over the compositor's Unix
socket. It uses only the Python standard library. Your compositor must offer
the `zwp_idle_inhibit_manager_v1` global from the `idle_inhibit_unstable_v1`
protocol.

## Installation

```
pip install .
```

## Usage

```
wayhibitor
```

The command takes no options apart from `--help`.

It finds the compositor in this order:

1. If `WAYLAND_SOCKET` holds a file descriptor number, it uses that
   descriptor.
2. Otherwise it reads `WAYLAND_DISPLAY`, which defaults to `wayland-0`. An
   absolute path is used as it is. A bare name is looked up inside
   `XDG_RUNTIME_DIR`.

Once connected, it binds `wl_compositor` and `zwp_idle_inhibit_manager_v1`. It
creates a surface and asks the compositor for an idle inhibitor on that
surface. It then handles events until the connection ends.

To stop it, press Ctrl+C or send it `SIGTERM`. It then destroys the
inhibitor, the manager and the surface, closes the connection, and exits with
status 0.

It prints a message to standard error and exits with status 1 in these cases:

- No Wayland display can be reached.
- The compositor does not offer `zwp_idle_inhibit_manager_v1`.
- The compositor does not offer `wl_compositor`.
- The compositor reports a protocol error, sends malformed data, or closes
  the connection.

A typical use is to run it in the background for as long as you need the
screen awake:

```
wayhibitor &
# ... watch a video, give a presentation ...
kill %1
```

The surface it creates is never given a buffer or committed. Whether the
compositor honours an inhibitor on such a surface is up to the compositor.

## Library use

The protocol pieces can also be used from Python:

- `wayhibitor.wire` encodes and decodes Wayland messages. It provides
  `pack_uint`, `pack_string`, `unpack_uint`, `unpack_string`,
  `encode_message`, `split_messages`, the `Message` dataclass, and
  `WireError` for malformed data.
- `wayhibitor.protocol` describes the interfaces that are used. These are
  `wl_display`, `wl_registry`, `wl_callback`, `wl_compositor`, `wl_surface`
  and the two idle-inhibit interfaces. Each one is an `Interface` whose
  `Request` entries are looked up with `opcode()` and `request()`.
- `wayhibitor.client` manages a connection. `connect()` and `socket_path()`
  locate the compositor. `Display` allocates object ids, sends requests,
  registers event handlers with `on_event()`, and offers `get_registry()`,
  `bind()`, `dispatch()`, `roundtrip()` and `close()`. `Display` can be used
  as a context manager. Failures raise `DisplayError`.
- `wayhibitor.cli.IdleInhibitor` ties these together through `setup()`,
  `inhibit()`, `run()` and `cleanup()`. `wayhibitor.cli.main()` is the
  command.

## What it does not do

There is no timeout, no way to inhibit only for the lifetime of another
program, and no status output. The inhibitor lasts exactly as long as the
process runs. Only the requests that the inhibitor needs are sent, and events
other than registry globals, callbacks and display errors are ignored.

## Running the tests

```
pip install .[test]
pytest
```