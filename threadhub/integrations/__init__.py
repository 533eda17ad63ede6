"""
Integration Layer

Provider-specific mailbox adapters between the thread pipeline and the
Gmail / Microsoft Graph APIs. The pipeline talks to them only through
the ThreadProvider ABC.
"""
