"""
threadhub.api.v1 - Version 1 of the threadhub API
"""
