# -*- coding: utf-8 -*-
"""Turn backend failures into the short banner messages the dashboard shows."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException

from .baas.errors import BAAS_ERRORS, is_no_rows, status_for

logger = logging.getLogger(__name__)


@contextmanager
def banner_on_error(detail: str, *, not_found: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except BAAS_ERRORS as exc:
        logger.error("%s (%s)", detail, exc)
        message = not_found if (not_found and is_no_rows(exc)) else detail
        raise HTTPException(status_code=status_for(exc), detail=message) from exc
