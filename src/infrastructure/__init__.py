"""
Infrastructure layer - External adapters for the task engine.

This layer contains:
- PostgreSQL task repository (SQLAlchemy async)
- In-memory stubs for development and tests
- Structured logging and Prometheus metrics

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""
