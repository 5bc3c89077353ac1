from .communities import router as communities_router
from .community_records import news_router, businesses_router, resources_router
from .debug import router as debug_router
from .documents import router as documents_router
from .posts import router as posts_router
from .resource_content import router as resource_content_router
from .users import router as users_router

ROUTERS = [
    communities_router,
    users_router,
    posts_router,
    news_router,
    businesses_router,
    resources_router,
    resource_content_router,
    documents_router,
    debug_router,
]
