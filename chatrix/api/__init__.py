"""
HTTP API layer - FastAPI application and routes
"""
