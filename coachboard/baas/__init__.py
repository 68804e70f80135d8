# -*- coding: utf-8 -*-
"""Access to the hosted backend (auth, tables, object storage) through supabase."""

from .client import anon_client, first_row, user_client
from .errors import BAAS_ERRORS, NO_ROWS_CODE, error_message, error_status, is_no_rows, status_for

__all__ = [
    "BAAS_ERRORS",
    "NO_ROWS_CODE",
    "anon_client",
    "error_message",
    "error_status",
    "first_row",
    "is_no_rows",
    "status_for",
    "user_client",
]
