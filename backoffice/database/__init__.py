from .session import Base, engine, build_engine, AsyncSessionLocal, get_db, init_db

__all__ = ["Base", "engine", "build_engine", "AsyncSessionLocal", "get_db", "init_db"]
