"""データベース接続モジュール

埋め込みストア（sqlite）用に、SQLAlchemyでSQLiteへの接続を管理する。
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from keiba_batch.models.base import Base


def get_engine(db_path: str | Path) -> Engine:
    """SQLiteデータベースエンジンを作成する

    Args:
        db_path: データベースファイルのパス。
                 ":memory:" を指定するとインメモリDBを作成。

    Returns:
        SQLAlchemyのEngineオブジェクト
    """
    db_path = str(db_path)
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(f"sqlite:///{db_path}")


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """データベースセッションを取得するコンテキストマネージャー

    正常終了時は自動コミット、例外発生時は自動ロールバックを行う。

    Args:
        engine: SQLAlchemyのEngineオブジェクト

    Yields:
        Sessionオブジェクト
    """
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    session = session_factory()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """テーブルを初期化する（既に存在する場合は何もしない）"""
    Base.metadata.create_all(engine)
