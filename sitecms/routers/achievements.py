from sitecms.routers.crud import build_resource_router

# Lists nest under data.achievements, single entities under data.achievement
router = build_resource_router(
    "achievements",
    list_key="achievements",
    item_key="achievement",
    default_limit=50,
)
