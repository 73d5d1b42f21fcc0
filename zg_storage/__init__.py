"""
Gateway package exposing 0G decentralized storage over HTTP and the command line.

Modules are organized to separate the API, the storage client adapter, transfer
orchestration, and local file staging so that front-ends stay thin.
"""

from .config import settings  # noqa: F401  (re-export for convenience)
