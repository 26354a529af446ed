# Routes package init
"""
Menagerie Backend: Routes Package
==================================

Route Inventory:
    - views.py:      GET /, /animals/new, /animals/{id}/edit   (HTML)
    - animals.py:    /animals and /animals/{id}                 (JSON API)
    - resources.py:  generic binder used by animals.py
    - health.py:     GET /health

Routes are THIN: they read the request and hand it to a controller or the
gateway. Status codes for the API come from the Resource Controller.
"""
