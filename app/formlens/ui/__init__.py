"""
HTML rendering for the page shell, preview stack and inspector.
"""
