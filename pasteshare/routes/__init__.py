# Routes package init
"""
PasteShare — API Routes Package
===============================

What:  HTTP route handlers that accept requests and return JSON responses.

Route Inventory:
    - pastes.py:  POST /api/pastes                       (submit a paste)
                  POST /api/pastes/{id}/annotations      (annotate a paste)
                  GET  /api/pastes/{id}                  (paste + annotations)
                  GET  /api/pastes/{id}/raw              (verbatim content)
    - browse.py:  GET  /api/pastes                       (browse, query params)
                  GET  /api/browse/{args}                (browse, path-encoded)
                  GET  /api/home                         (front page)
                  GET  /api/diff/{left}/{right}          (line diff)
    - health.py:  GET  /health                           (service health check)

Routes stay thin: parse ids and forms, call PasteService, set headers.
"""
