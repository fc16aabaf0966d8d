"""
Services package for SiteBook.

Server-side repositories (one per entity family) and the client-side
entity store, scoping layer, action layer and sync client.

Repositories are imported from their own modules; this package stays
free of database imports so database.models can use the shared helpers.
"""
