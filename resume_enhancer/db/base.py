from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Models are registered in resume_enhancer.db.models to avoid circular imports.
# All models must import Base from this module.
