# Lockbox API - local HTTP surface for the vault commands

from .main import app, start_api_server

__all__ = ["app", "start_api_server"]
