"""Serverless entrypoint exposing the recipe catalog ASGI app."""

import site
from pathlib import Path

site.addsitedir(str(Path(__file__).resolve().parent.parent / "src"))

from recipe_catalog.api.asgi import app  # noqa: E402

__all__ = ["app"]
