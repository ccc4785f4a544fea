from ..models.user import User
from ..models.family import Family
from ..models.item import Item
from ..db.base_class import Base
