from app.db.session import engine
from app.db.base import Base

# IMPORTANT: this "registers" the models before creating tables
import app.models  # noqa: F401


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
