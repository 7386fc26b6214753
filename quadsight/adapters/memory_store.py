"""
内存存储适配器 - 实现 AnalysisStorePort

进程内键值存储，带创建时间，支持按时间倒序列出和按年龄清理。
进程退出即丢失，不做持久化。
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Any, Dict, Generic, List, Optional, TypeVar

from quadsight.ports.interfaces import AnalysisStorePort


T = TypeVar('T')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoreEntry(Generic[T]):
    """存储条目"""
    value: T
    created_at: datetime

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or _utcnow()) - self.created_at


class InMemoryStore(AnalysisStorePort[T]):
    """
    线程安全的内存存储

    - 同一个键后写覆盖（last-write-wins）
    - list_recent 按 created_at 倒序
    - evict_older_than 由调度任务周期调用
    """

    def __init__(self, name: str = "store"):
        self.name = name
        self._entries: "OrderedDict[str, StoreEntry[T]]" = OrderedDict()
        self._lock = RLock()
        self._evictions = 0

    def put(self, key: str, value: T, created_at: Optional[datetime] = None) -> None:
        if created_at is None:
            created_at = _utcnow()
        elif created_at.tzinfo is None:
            # 无时区的时间按 UTC 处理
            created_at = created_at.replace(tzinfo=timezone.utc)
        with self._lock:
            self._entries[key] = StoreEntry(value=value, created_at=created_at)

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry else None

    def delete(self, key: str) -> bool:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
                return True
            return False

    def list_recent(self, limit: int = 10) -> List[T]:
        """
        按创建时间倒序列出

        Args:
            limit: 最多返回条数（<= 0 时返回空列表）
        """
        if limit <= 0:
            return []
        with self._lock:
            entries = sorted(self._entries.values(), key=lambda e: e.created_at, reverse=True)
        return [entry.value for entry in entries[:limit]]

    def evict_older_than(self, max_age: timedelta) -> int:
        """
        清理过期条目

        Returns:
            清理的条目数
        """
        now = _utcnow()
        with self._lock:
            expired_keys = [
                k for k, v in self._entries.items()
                if v.age(now) > max_age
            ]
            for key in expired_keys:
                del self._entries[key]
            self._evictions += len(expired_keys)
            return len(expired_keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def stats(self) -> Dict[str, Any]:
        """获取统计信息"""
        with self._lock:
            oldest = min((e.created_at for e in self._entries.values()), default=None)
            return {
                "name": self.name,
                "size": len(self._entries),
                "evictions": self._evictions,
                "oldest": oldest.isoformat() if oldest else None,
            }
