from sitecms.db.models import Base
from sitecms.db.database import engine, get_db, SessionLocal
from sitecms.db.init_db import init_database

__all__ = ["Base", "engine", "get_db", "SessionLocal", "init_database"]
