from ziria.routes.admin import router as admin_router
from ziria.routes.render import router as render_router

__all__ = ["admin_router", "render_router"]
