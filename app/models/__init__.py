# Roadside Compliance: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User, UserRole                     # noqa
from app.models.vehicle import Vehicle                          # noqa
from app.models.document import Document, DocumentStatus        # noqa
