"""Strategy storage backends.

  - MemoryStrategyStore:
      Process-lifetime mapping of id -> StrategyRecord. Records are
      immutable and replaced wholesale on update; there is no locking, so two
      racing updates on the same id can lose one of them.

  - SqlStrategyStore:
      Same interface over the ``strategy`` table through Flask-SQLAlchemy.

The application holds exactly one store in ``app.extensions``; tests build
their own per app.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional
import uuid

STATUSES = ('pending', 'computing', 'completed', 'failed')
# 'completed' is only reachable through update_score
SETTABLE_STATUSES = ('pending', 'computing', 'failed')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class StrategyRecord:
    id: str
    risk_level: int
    allocation: int
    timeframe: int
    encrypted_data: str
    encrypted_hash: str
    status: str = 'pending'
    encrypted_score: Optional[str] = None
    decrypted_score: Optional[int] = None
    created_at: Optional[datetime] = None
    computed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'riskLevel': self.risk_level,
            'allocation': self.allocation,
            'timeframe': self.timeframe,
            'encryptedData': self.encrypted_data,
            'encryptedHash': self.encrypted_hash,
            'encryptedScore': self.encrypted_score,
            'decryptedScore': self.decrypted_score,
            'status': self.status,
            'createdAt': _iso(self.created_at),
            'computedAt': _iso(self.computed_at),
        }


def _check_status(status: str) -> None:
    if status not in SETTABLE_STATUSES:
        raise ValueError(f"Cannot set status {status!r} directly")


class StrategyStore(ABC):
    """CRUD-style storage for StrategyRecord."""

    name = 'abstract'

    @abstractmethod
    def create(self, submission: dict) -> StrategyRecord:
        """Create a pending record from a validated submit body."""

    @abstractmethod
    def get(self, strategy_id: str) -> Optional[StrategyRecord]:
        ...

    @abstractmethod
    def list(self) -> List[StrategyRecord]:
        ...

    @abstractmethod
    def update_status(self, strategy_id: str, status: str) -> Optional[StrategyRecord]:
        """Move a record to pending/computing/failed, clearing any score."""

    @abstractmethod
    def update_score(self, strategy_id: str, encrypted_score: str,
                     decrypted_score: Optional[int] = None) -> Optional[StrategyRecord]:
        """Attach a score and mark the record completed."""

    def stats(self) -> Dict[str, int]:
        records = self.list()
        return {
            'total': len(records),
            'completed': sum(1 for r in records if r.status == 'completed'),
        }


class MemoryStrategyStore(StrategyStore):
    name = 'memory'

    def __init__(self):
        self._strategies: Dict[str, StrategyRecord] = {}

    def create(self, submission: dict) -> StrategyRecord:
        record = StrategyRecord(
            id=str(uuid.uuid4()),
            risk_level=submission['riskLevel'],
            allocation=submission['allocation'],
            timeframe=submission['timeframe'],
            encrypted_data=submission['encryptedData'],
            encrypted_hash=submission['encryptedHash'],
            created_at=_utcnow(),
        )
        self._strategies[record.id] = record
        return record

    def get(self, strategy_id: str) -> Optional[StrategyRecord]:
        return self._strategies.get(strategy_id)

    def list(self) -> List[StrategyRecord]:
        return list(self._strategies.values())

    def update_status(self, strategy_id: str, status: str) -> Optional[StrategyRecord]:
        _check_status(status)
        record = self._strategies.get(strategy_id)
        if record is None:
            return None
        updated = replace(record, status=status, encrypted_score=None,
                          decrypted_score=None, computed_at=None)
        self._strategies[strategy_id] = updated
        return updated

    def update_score(self, strategy_id: str, encrypted_score: str,
                     decrypted_score: Optional[int] = None) -> Optional[StrategyRecord]:
        record = self._strategies.get(strategy_id)
        if record is None:
            return None
        updated = replace(record, status='completed', encrypted_score=encrypted_score,
                          decrypted_score=decrypted_score, computed_at=_utcnow())
        self._strategies[strategy_id] = updated
        return updated


class SqlStrategyStore(StrategyStore):
    name = 'sql'

    def __init__(self, db):
        self.db = db

    @staticmethod
    def _to_record(row) -> StrategyRecord:
        return StrategyRecord(
            id=row.id,
            risk_level=row.risk_level,
            allocation=row.allocation,
            timeframe=row.timeframe,
            encrypted_data=row.encrypted_data,
            encrypted_hash=row.encrypted_hash,
            status=row.status,
            encrypted_score=row.encrypted_score,
            decrypted_score=row.decrypted_score,
            created_at=_aware(row.created_at),
            computed_at=_aware(row.computed_at),
        )

    def _commit(self) -> None:
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

    def _row(self, strategy_id: str):
        from fhevault.models import Strategy
        return self.db.session.get(Strategy, strategy_id)

    def create(self, submission: dict) -> StrategyRecord:
        from fhevault.models import Strategy
        row = Strategy(
            id=str(uuid.uuid4()),
            risk_level=submission['riskLevel'],
            allocation=submission['allocation'],
            timeframe=submission['timeframe'],
            encrypted_data=submission['encryptedData'],
            encrypted_hash=submission['encryptedHash'],
            status='pending',
            created_at=_utcnow(),
        )
        self.db.session.add(row)
        self._commit()
        return self._to_record(row)

    def get(self, strategy_id: str) -> Optional[StrategyRecord]:
        row = self._row(strategy_id)
        return self._to_record(row) if row else None

    def list(self) -> List[StrategyRecord]:
        from fhevault.models import Strategy
        rows = self.db.session.execute(
            self.db.select(Strategy).order_by(Strategy.created_at)
        ).scalars().all()
        return [self._to_record(row) for row in rows]

    def update_status(self, strategy_id: str, status: str) -> Optional[StrategyRecord]:
        _check_status(status)
        row = self._row(strategy_id)
        if row is None:
            return None
        row.status = status
        row.encrypted_score = None
        row.decrypted_score = None
        row.computed_at = None
        self.db.session.add(row)
        self._commit()
        return self._to_record(row)

    def update_score(self, strategy_id: str, encrypted_score: str,
                     decrypted_score: Optional[int] = None) -> Optional[StrategyRecord]:
        row = self._row(strategy_id)
        if row is None:
            return None
        row.status = 'completed'
        row.encrypted_score = encrypted_score
        row.decrypted_score = decrypted_score
        row.computed_at = _utcnow()
        self.db.session.add(row)
        self._commit()
        return self._to_record(row)
