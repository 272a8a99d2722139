"""Test fixture package for the marketplace locator.

Contains fixtures for:
- The FastAPI application and async HTTP clients
- A location service whose reverse geocoding proxy is mocked
"""
