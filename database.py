from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache, wraps
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite:///./coin_flip.db"
    # clock: 以秒為單位的區塊時間；clock_ms: 毫秒
    entropy_source: str = "clock"
    lock_shards: int = 64


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()


def create_db_engine(database_url: str, **kwargs):
    """
    建立 SQLAlchemy engine

    SQLite 的連線會被 FastAPI 的 worker thread 共用，需要關掉 check_same_thread；
    記憶體資料庫（sqlite://）另外需要 StaticPool，否則每條連線都是空的資料庫

    參數：
        database_url: 資料庫連線字串
        kwargs: 其餘傳給 create_engine 的參數
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs.setdefault("poolclass", StaticPool)
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：每個 request 一個 Session

    flip 的 commit 由 @transactional 處理；這裡只負責關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保一次 flip 的所有寫入與事件一起 commit

    使用方式：
        @transactional
        def apply(db: Session, ...):
            # Player、Game、EventLog 的寫入都在同一個 transaction 內
            ...

    如果函式內發生異常：
        - 自動 rollback（包含已寫入 outbox 的事件）
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 第一個參數必須是 db: Session
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 db session（可能在 args 或 kwargs）
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
