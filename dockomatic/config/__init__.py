"""
Configuration package façade.

* :func:`load_settings` – Resolve, read and validate the helper settings.
* :class:`HelperSettings` – Pydantic model with the validated values.
"""

from .settings import HelperSettings, load_settings  # noqa: F401

__all__: list[str] = ["HelperSettings", "load_settings"]
