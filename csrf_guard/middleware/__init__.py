"""Request pipeline components (CSRF middleware and token retrieval)"""
