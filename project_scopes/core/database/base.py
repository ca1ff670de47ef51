# File: project_scopes/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. Feature models (config entries) inherit from this.
Base = declarative_base()
