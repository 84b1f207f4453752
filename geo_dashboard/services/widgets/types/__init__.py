"""
Concrete widget renderers.

Modules here are imported lazily by the WidgetRegistry; do not import
them from this package's ``__init__``.
"""
