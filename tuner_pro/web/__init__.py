from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

__all__ = ["app", "main"]

_LAZY = {"app", "main"}


def __getattr__(name: str):
    # Importing the server pulls in fastapi and soundfile; defer until asked.
    if name in _LAZY:
        from tuner_pro.web import server

        return getattr(server, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
