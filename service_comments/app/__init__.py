"""
Comments Service package for the Model Repository.

This package decides who may create or delete a comment on a versioned,
namespaced model and notifies everyone taking part in the discussion
when a new comment arrives. It provides:

- app.main: API surface for comment operations and health.
- app.service: Comment lifecycle (create, delete, list, save).
- app.access: Access decision policy shared with other code paths.
- app.notifications: Recipient fan-out and notification transports.
- app.persistence: Comment storage (in-memory, PostgreSQL).
- app.adapters: Model catalog, namespace, role and account lookups.

Guidelines:
- Collaborators are injected as ports; the core never builds adapters.
- Create denial raises, delete denial is a plain negative result.
- Notification delivery is best-effort and never fails a create.
"""
