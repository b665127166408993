"""Routing — command-line parsing and route-to-action resolution.

The parser turns raw arguments into a ``Route`` and ``ParamSet``; a
``CommandResolver`` maps the route onto a controller action and reports
unroutable routes as a tagged outcome rather than an exception.
"""
