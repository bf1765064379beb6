from sitecms.routers.crud import build_resource_router

router = build_resource_router("projects")
