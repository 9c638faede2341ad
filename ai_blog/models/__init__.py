# -*- coding: utf-8 -*-
"""
AI Blog — models package entrypoint.

This app uses a models/ package (not a single models.py); importing the
modules here is what registers them with Django.
"""

from .plan import BlogPlan
from .topic import BlogTopic
from .content import BlogContent

__all__ = [
    "BlogPlan",
    "BlogTopic",
    "BlogContent",
]
