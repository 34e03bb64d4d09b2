"""HTTP API for cubik."""

from cubik.web.app import create_app

__all__ = ["create_app"]
