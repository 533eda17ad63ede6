"""
threadhub.api.v1.endpoints - API Endpoint Modules
"""
