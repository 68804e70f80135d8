# -*- coding: utf-8 -*-
"""Coachboard: coach dashboard backend over a hosted auth/table/storage service."""

__version__ = "1.0.0"
