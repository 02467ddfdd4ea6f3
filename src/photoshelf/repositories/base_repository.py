from sqlalchemy.orm import Session


class BaseRepository:
    """Base repository class holding the request's database session."""

    def __init__(self, db: Session):
        self.db = db
