"""
Maps domain exceptions onto HTTP errors.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from admin_backend.store import DocumentNotFound, StoreError


@contextmanager
def http_errors(description: str) -> Iterator[None]:
    """
    Missing documents become 404, store failures 503 and invalid input 400.
    """
    try:
        yield
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=f"{description} not found") from e
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Data store unavailable: {e}") from e
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
