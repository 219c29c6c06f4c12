"""Real-time notification and cache synchronization for the dashboard.

The package is regular (not a namespace package) so the local copy wins over
any similarly named module installed in the environment.
"""
