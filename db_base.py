from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    Base class for the remote store's ORM models.

    Kept free of engine/session imports so the models can be loaded
    without pulling in async drivers.
    """
    pass
