from models.base import Base

from models.document import Document
from models.asset import Asset
