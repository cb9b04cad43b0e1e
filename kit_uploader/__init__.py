"""
Katalon test project uploader.

Uploads a local test project archive to Katalon Analytics: authenticates,
streams the archive to a presigned storage URL and registers the upload
with a project.
"""

__version__ = "1.0.0"

from kit_uploader.cli import main

__all__ = ["main", "__version__"]
