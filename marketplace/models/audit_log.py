# marketplace/models/audit_log.py
from datetime import datetime
from typing import Any, Dict, Optional

from marketplace.extensions import db
from marketplace.core.database import generate_uuid


class AuditLog(db.Model):
    """Record of an administrative change made through the API"""

    __tablename__ = "audit_logs"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    action = db.Column(db.String(50), nullable=False)  # create, update, delete, toggle...
    entity_type = db.Column(db.String(50), nullable=False)  # role, feature_flag, vendor...
    entity_id = db.Column(db.String(100), nullable=True)

    changes = db.Column(db.JSON, nullable=True)
    event_metadata = db.Column(db.JSON, nullable=True)

    # Request context
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    endpoint = db.Column(db.String(255), nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = db.relationship("User", backref=db.backref("audit_logs", lazy="dynamic"))

    def __repr__(self):
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"

    @staticmethod
    def log_action(
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
        event_metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> "AuditLog":
        log_entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=changes,
            event_metadata=event_metadata,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent[:255] if user_agent else None,
            endpoint=endpoint,
        )

        db.session.add(log_entry)
        db.session.commit()

        return log_entry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "changes": self.changes,
            "event_metadata": self.event_metadata,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "endpoint": self.endpoint,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
