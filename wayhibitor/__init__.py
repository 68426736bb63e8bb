"""Keep a Wayland session awake through the idle-inhibit protocol."""

__version__ = "0.1.0"
__all__ = ["__version__"]