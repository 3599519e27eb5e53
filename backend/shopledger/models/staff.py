from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

STAFF_ROLES = ("manager", "regular")


class Staff(db.Model):
    """Store staff member; the actor recorded on every checkout."""
    __tablename__ = "staff"
    __table_args__ = (
        db.UniqueConstraint("store_id", "staff_number", name="uq_staff_store_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    staff_number = db.Column(db.String(32), nullable=False)
    mobile_number = db.Column(db.String(32), nullable=True)
    role = db.Column(db.String(16), nullable=False, default="regular")

    is_archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    store = db.relationship("Store", backref=db.backref("staff", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "staff_number": self.staff_number,
            "mobile_number": self.mobile_number,
            "role": self.role,
            "is_archived": self.is_archived,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }
