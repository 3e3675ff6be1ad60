# marketplace/models/permission.py
from marketplace.extensions import db
from marketplace.core.database import BaseModel
from marketplace.core.constants import ACTION_LABELS, Permission as PermissionName


class Permission(BaseModel):
    __tablename__ = "permissions"

    name = db.Column(db.String(100), unique=True, nullable=False)
    resource = db.Column(db.String(50), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    display_name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    __table_args__ = (
        db.UniqueConstraint("resource", "action", name="uq_permission_resource_action"),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.name and self.resource and self.action:
            self.name = f"{self.resource}:{self.action}"

    def __repr__(self):
        return f"<Permission {self.name}>"

    @property
    def pair(self):
        return (self.resource, self.action)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "resource": self.resource,
            "action": self.action,
            "display_name": self.display_name,
            "description": self.description,
            "created_at": self.isoformat(self.created_at),
            "updated_at": self.isoformat(self.updated_at),
        }

    @staticmethod
    def find_by_pair(resource, action):
        return Permission.query.filter_by(resource=resource, action=action).first()

    @staticmethod
    def find_by_resource(resource):
        return Permission.query.filter_by(resource=resource).order_by(Permission.action).all()

    @staticmethod
    def seed_defaults():
        """Insert any missing permission from the built-in catalogue"""
        created = []
        for perm in PermissionName:
            if Permission.find_by_pair(perm.resource, perm.action):
                continue
            verb, description = ACTION_LABELS.get(perm.action, (perm.action.title(), "{}"))
            label = perm.resource.replace("-", " ").title()
            permission = Permission(
                resource=perm.resource,
                action=perm.action,
                display_name=f"{verb} {label}",
                description=description.format(label.lower()),
            )
            db.session.add(permission)
            created.append(permission)

        db.session.commit()
        return created
