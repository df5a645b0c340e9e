"""
Source code root package.

This package contains all application source code organized by responsibility:
- api/       : FastAPI routes and HTTP handling
- core/      : Configuration, logging, errors and middleware
- services/  : Survey repository and chat relay
- llm/       : Upstream completion client
- database/  : Ordered key-value store adapter
- models/    : Pydantic models for records and request/response schemas
"""
