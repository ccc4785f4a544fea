from .common import ORMModel


class MemberOut(ORMModel):
    id: str
    name: str
    email: str
