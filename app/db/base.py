from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Note: Models register themselves by importing Base from this module;
# app.db.models imports all of them for create_all and Alembic autogenerate
