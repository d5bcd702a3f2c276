"""
Command-line tools for wasmseal.
"""
