from agentgate.api.routes import router

__all__ = ["router"]
