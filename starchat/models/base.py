from sqlalchemy import Column, DateTime, Integer, func
from sqlalchemy.orm import declarative_base, declared_attr


# Define a base model with common fields
class BaseModel(declarative_base()):
    __abstract__ = True  # Make this an abstract base class

    # Monotonic surrogate key, also used to break created_at ties when ordering
    id = Column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True), nullable=False, server_default=func.now()
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


# The MetaData object is now associated with the BaseModel's declarative base
metadata = BaseModel.metadata
