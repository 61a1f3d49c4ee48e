"""Routing — segment trie with capture segments and router composition.

Routes are registered during setup, merged or nested into other
routers, and frozen before the app serves requests.
"""
