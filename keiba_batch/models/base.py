"""SQLAlchemyベースクラス定義"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """埋め込みストアのモデルの基底クラス

    SQLAlchemy 2.0スタイルのDeclarativeBaseを使用。
    """

    pass
