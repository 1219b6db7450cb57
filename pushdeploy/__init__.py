"""Webhook-triggered deployment executor.

Pushdeploy receives push notifications from a source-control host,
authenticates them against a per-repository shared secret, and runs the
configured deploy command in the repository checkout.  The latest outcome
for each repository is tracked in memory and persisted to a JSON snapshot
so that history survives restarts.

Subpackages
-----------
registry
    Repository registry models and YAML loader.
webhook
    Signature verification and branch filtering.
deploy
    Shell execution and the per-repository deployment pipeline.
status
    Status tracking, persistence, and the status page renderer.
api
    Falcon ASGI application and resources.
"""
