# Schemas package init
"""
PasteShare — Pydantic Schemas Package
=====================================

What:  Plain-data contracts exchanged between the paste engine and its callers.
"""
