# Services package init
"""
LawDesk Backend — Services Layer
==================================

Service Inventory:
    - PostStore:        post create/list/lookup/delete, slug uniqueness
    - FeedbackStore:    testimonial submission and moderation lifecycle
    - ImageStorage:     validation and storage of optional post images
    - MarkdownRenderer: Markdown → HTML for single-post responses
    - slug:             slugify() and the timestamp-suffixed build_slug()

Stores take an AsyncSession in their constructor and are built per request
(routes/dependencies.py); nothing here holds a module-level connection.
"""
