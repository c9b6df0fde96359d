"""
Application layer - Use cases and orchestration for the task engine.

This layer contains:
- Application services (lifecycle, timer, recurrence, splitting, scoring,
  batch operations, analysis, comments) and the TaskEngine facade
- Port definitions (abstract interfaces for infrastructure)
- DTOs returned by the services

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, api
"""
