"""ScholarSync: research assistant backend with tool-calling chat."""

__version__ = "1.0.0"
