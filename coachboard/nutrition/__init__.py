# -*- coding: utf-8 -*-
"""Nutrition domain (assigned plans, meal logs, daily summaries, chart geometry).

Meal logs and plans live in the hosted backend; everything here aggregates
rows that were already fetched.
"""
