"""
HTTP management surface for the WebSocket registry.
"""

from ws_gateway.api.routes import router

__all__ = ["router"]
