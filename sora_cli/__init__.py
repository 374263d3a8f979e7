"""Interactive client for the /v1/videos generation API"""

__version__ = "0.1.0"
