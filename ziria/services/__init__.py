from ziria.services import pipeline
from ziria.services.render import RenderService

__all__ = ["RenderService", "pipeline"]
