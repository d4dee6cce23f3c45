"""
Portfolio CMS Back-Office

Content management and visitor analytics services for a multilingual
portfolio website.
"""

__version__ = "1.0.0"
