"""lms_plugins: quiz grading, group and report toolbars, plugin settings."""

__all__ = ["__version__"]
__version__ = "0.1.0"
