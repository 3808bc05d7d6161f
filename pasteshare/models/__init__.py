# Models package init
"""
PasteShare — ORM Models Package
===============================

What:  SQLAlchemy models registered on pasteshare.database.Base.
"""
