from datetime import datetime, timezone
def utcnow():
    return datetime.now(timezone.utc)
from .user import User
from .family import Family
from .item import Item, Category, Urgency
