# tests/__init__.py
"""
Test Suite for the Reverse-Invention Generator.

Organization:
- `core`: Use cases, coercion, fallback orchestration and prompts with fake providers.
- `adapters`: Provider adapters (httpx.MockTransport), cache, deck renderer and the HTTP API.
- `shared`: Configuration and rate limiting.
"""
