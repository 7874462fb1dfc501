# SPDX-License-Identifier: MIT
"""API route modules."""

from . import download, packages, upload, users

__all__ = ["packages", "download", "upload", "users"]
