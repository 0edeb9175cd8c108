"""
Audit Trail Module

Hash-chained append-only audit log with SHA-256 for tamper detection.
Customer registration, account opening and every transfer outcome are
recorded here once their unit of work has committed.
"""

import hashlib
import json
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum

from .storage import StorageInterface, StorageRecord, serialize_value


class AuditEventType(Enum):
    """Types of audit events"""
    CUSTOMER_CREATED = "customer_created"
    CUSTOMER_UPDATED = "customer_updated"
    ACCOUNT_OPENED = "account_opened"
    TRANSFER_POSTED = "transfer_posted"
    TRANSFER_REJECTED = "transfer_rejected"
    LARGE_TRANSACTION_LOGGED = "large_transaction_logged"


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    event_type: AuditEventType
    entity_type: str  # customer, account, transaction
    entity_id: str
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any]

    def __post_init__(self):
        self.entity_id = str(self.entity_id)
        if self.metadata:
            self.metadata = serialize_value(self.metadata)

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash
        """
        hash_data = {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'metadata': self.metadata
        }

        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        """Create AuditEvent from dictionary with proper enum deserialization"""
        data = dict(data)
        if isinstance(data['event_type'], str):
            data['event_type'] = AuditEventType(data['event_type'])
        return super().from_dict(data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection
    """

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events",
                 enabled: bool = True):
        self.storage = storage
        self.table_name = table_name
        self.enabled = enabled

    def _last_hash(self) -> str:
        events = self.storage.load_all(self.table_name)
        if events:
            return events[-1].get('current_hash', '')
        return ''

    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditEvent]:
        """
        Log an audit event with hash chaining

        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data

        Returns:
            Created AuditEvent, or None when audit logging is disabled
        """
        if not self.enabled:
            return None

        # Id allocation, chain read and append commit as one unit of work
        with self.storage.atomic():
            now = datetime.now(timezone.utc)

            event = AuditEvent(
                id=self.storage.next_id(self.table_name),
                created_at=now,
                updated_at=now,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                previous_hash=self._last_hash(),
                current_hash="",
                metadata=metadata or {}
            )
            event.current_hash = event.calculate_hash()

            self.storage.save(self.table_name, event.id, event.to_dict())
            return event

    def get_events_for_entity(self, entity_type: str, entity_id) -> List[AuditEvent]:
        """Get all audit events for a specific entity in chain order"""
        filters = {
            'entity_type': entity_type,
            'entity_id': str(entity_id)
        }
        return [AuditEvent.from_dict(data) for data in self.storage.find(self.table_name, filters)]

    def get_events_by_type(self, event_type: AuditEventType) -> List[AuditEvent]:
        """Get audit events of one type in chain order"""
        events_data = self.storage.find(self.table_name, {'event_type': event_type.value})
        return [AuditEvent.from_dict(data) for data in events_data]

    def get_all_events(self) -> List[AuditEvent]:
        return [AuditEvent.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }

        events = self.get_all_events()
        result['total_events'] = len(events)

        previous_hash = ""
        for i, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result

    def count_events(self) -> int:
        """Get total number of audit events"""
        return self.storage.count(self.table_name)
