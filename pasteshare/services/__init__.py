# Services package init
"""
PasteShare — Services Package
=============================

What:  The paste storage and thread-addressing engine.

Service Inventory:
    - allocator.py:        IdentifierAllocator (public sequential / private random ids)
    - paste_store.py:      PasteStore (transactional insert, get, thread lookup)
    - thread_resolver.py:  ThreadResolver (annotation ordinals)
    - paginator.py:        Paginator (filtered browse pages, paste aggregates)
    - diff_engine.py:      DiffEngine (line diff of two pastes)
    - paste_service.py:    PasteService (request-level orchestration)

Dependency order (leaf first):
    IdentifierAllocator → PasteStore → ThreadResolver → Paginator → PasteService
                                     DiffEngine ────────────────────┘
"""
