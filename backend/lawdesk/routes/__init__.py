# Routes package init
"""
LawDesk Backend — API Routes Package
======================================

Route Inventory:
    - posts.py:     GET /posts, GET /posts/category/{name}, GET /posts/{slug},
                    POST /add-post, DELETE /posts/{id}
    - feedback.py:  POST /add-feedback, GET /testimonials,
                    GET /feedback/pending, PUT /feedback/approve/{id},
                    DELETE /feedback/{id}
    - uploads.py:   GET /uploads/{path}
    - health.py:    GET /health

Routes are thin: they read the request, call a store obtained from
dependencies.py, and return a schema.
"""
