from .engine import make_engine, init_db
from .models import Base, Account, Campaign, AdGroup, Ad, Keyword, Sitelink, Label, EntityLabel, AccountLabel

__all__ = [
    "make_engine",
    "init_db",
    "Base",
    "Account",
    "Campaign",
    "AdGroup",
    "Ad",
    "Keyword",
    "Sitelink",
    "Label",
    "EntityLabel",
    "AccountLabel",
]
