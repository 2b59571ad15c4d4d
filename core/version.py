from importlib import metadata

try:
    __version__ = metadata.version("eventos-crm")
except metadata.PackageNotFoundError:  # pragma: no cover - during local dev
    from eventos import __version__
