"""
Project-side configuration for the buf launcher.

This package is responsible for:
* Locating the nearest project manifest above the working directory.
* Reading a pinned buf version from it, treating anything unreadable as unset.
"""
