"""
Route-level access control for the dashboard.

The engine owns the roster of access levels and org users; the guard turns
its answers into navigation decisions; the context module makes one engine
available to the whole application.
"""
