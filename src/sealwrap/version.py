"""
Single source of truth for the sealwrap package version.

In a wheel install, the version comes from importlib.metadata (set by
pyproject.toml). During editable / dev installs the fallback is the
hardcoded _FALLBACK string.
"""

_FALLBACK = "0.1.0"


def sealwrap_version() -> str:
    """Return the installed package version, or a dev fallback."""
    try:
        from importlib.metadata import PackageNotFoundError, version
    except ImportError:
        return _FALLBACK

    try:
        return version("sealwrap")
    except PackageNotFoundError:
        return _FALLBACK
