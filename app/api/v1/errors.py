"""
Translate access control exceptions into HTTP errors.
"""

from __future__ import annotations

from contextlib import contextmanager

import structlog
from fastapi import HTTPException

from app.access.errors import OwnerRemovalError, StoreError

log = structlog.get_logger()


@contextmanager
def access_control_errors():
    try:
        yield
    except OwnerRemovalError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except StoreError as exc:
        log.error("access_control.store_error", error=str(exc))
        raise HTTPException(status_code=502, detail="The data store rejected the request") from exc
