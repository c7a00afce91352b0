# Importing the package registers the bundle passes.
from . import passes  # noqa: F401

__all__: list[str] = []
