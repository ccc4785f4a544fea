from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    # table name defaults to the lower-cased class name
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
