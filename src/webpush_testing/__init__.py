"""Local mock of a browser push service for testing Web Push libraries."""
from webpush_testing.build_info import BUILD_INFO

__version__ = BUILD_INFO.version

__all__ = ["__version__"]
