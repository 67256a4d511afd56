"""
Shared utilities for the Model Comments service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application skeleton (health, metrics, error mapping)
- test_helpers: Factories shared by unit and integration tests

Any cross-cutting logic should live here to avoid import cycles. Do not
import from service_* packages into shared/.
"""
