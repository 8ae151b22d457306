"""Gateway resolution for the CLI.

Resolves ``"module:attribute"`` import strings, or a TOML route file,
to a perch Gateway instance.
"""

import importlib

from perch.app import Gateway


def resolve_gateway(import_string: str) -> Gateway:
    """Resolve an import string to a perch Gateway instance.

    Accepts ``"module:attribute"`` format.  When the attribute portion
    is omitted, defaults to ``"gateway"`` (e.g. ``"myproxy"`` resolves
    to ``myproxy.gateway``).

    Supports factory functions: if the resolved object is callable and
    not a Gateway instance, it will be called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a perch ``Gateway`` or factory.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "gateway"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Gateway):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Gateway):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.Gateway instance"
        raise TypeError(msg)

    return obj


def load_target(app: str | None, routes: str | None) -> Gateway:
    """Gateway from an import string or a route file (exactly one of them)."""
    if routes is not None:
        return Gateway.from_file(routes)
    if app is None:
        msg = "Either an import string or --routes FILE is required"
        raise TypeError(msg)
    return resolve_gateway(app)
