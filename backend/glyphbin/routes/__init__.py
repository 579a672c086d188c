# Routes package init
"""
Glyphbin Backend — Routes Package
==================================

Route Inventory:
    - pastes.py:  GET  /api/languages         (grammar names)
                  POST /api/pastes            (submit a paste)
                  GET  /api/pastes/{id}       (fetch a paste)
    - pages.py:   GET  /                      (submit form)
                  POST /paste/new             (form submission)
                  GET  /paste/{id}            (paste page)
    - health.py:  GET  /health                (service health check)

Design Principle:
    Routes are THIN. They pull data out of the request, call PasteService,
    and shape the response. Highlighting and storage rules live in services.
"""
