"""
Shared utilities for the Calorie Foods API.

This package aggregates common building blocks consumed by the service and
the client:

- config: Service and client configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and the client error taxonomy
- retry: Bounded exponential backoff
- secrets_manager: Database credential resolution
- test_helpers: Factories for test data and API Gateway events

Runtime modules here must not import from service_foods or foods_client;
test_helpers is the exception.
"""
