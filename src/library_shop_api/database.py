from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from library_shop_api.config import settings

engine = create_engine(settings.database_url, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
