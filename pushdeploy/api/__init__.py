"""Pushdeploy HTTP API layer.

Usage
-----
Create the application::

    from pushdeploy.api import AppDependencies, create_app

    app = create_app(AppDependencies(registry=..., tracker=..., service=...))

"""

from pushdeploy.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
