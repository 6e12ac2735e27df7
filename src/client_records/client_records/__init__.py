"""Client Records package.

A single-operator client register for a consultancy: a password-gated
dashboard over a JSON API. Organized by feature modules (clients, auth)
with a thin Flask controller layer over service/repository layers.
"""
