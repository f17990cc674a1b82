"""haproxyctl - command-line client for the HAProxy stats/admin page"""

__version__ = "1.0.0"
