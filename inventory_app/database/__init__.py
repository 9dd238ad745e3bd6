from .database import Base, SessionLocal, begin_write, engine, get_db
