"""Routing — the route table of a leaf application.

Routes are registered during setup and compiled when the app freezes.
"""
