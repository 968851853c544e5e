"""
percentfmt version information
"""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed percentfmt version string"""
    return __version__
