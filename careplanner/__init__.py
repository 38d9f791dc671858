"""Care-event interpretation and schedule planning for pet care.

This package contains the heuristic services and domain models, isolated
from storage, notifications and OCR so they are easy to test and reason about.
"""
