# Services package init
"""
Glyphbin Backend — Services Layer
==================================

Service Inventory:
    - identifiers:   128-bit paste IDs and deletion tokens, ID parsing
    - Highlighter:   read-only grammar/theme catalog and HTML rendering
    - PasteStore:    create-only insert and point lookup over SQLAlchemy
    - PasteService:  submit/fetch pipeline tying the three together
"""
