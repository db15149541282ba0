"""Mini README: Interactive interfaces (web/CLI) for GramChain.

Exports the FastAPI application factory that serves the ledger dashboard and
JSON routes. The Typer entry point in ``main_gramchain.py`` launches it.
"""

from .web_app import create_application

__all__ = ["create_application"]
