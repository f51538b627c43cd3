"""Audit and soft-delete columns shared by every catalog table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.core.dates import utcnow


class AuditMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String(100), nullable=False, default="")
    updated_at = Column(DateTime(timezone=True))
    updated_by = Column(String(100))


class SoftDeleteMixin:
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True))
    deleted_by = Column(String(100))

    def mark_deleted(self, actor, when=None):
        self.is_deleted = True
        self.deleted_at = when or utcnow()
        self.deleted_by = actor


class ReferenceMixin(AuditMixin, SoftDeleteMixin):
    """Columns shared by the dropdown lookup tables."""

    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def is_usable(self):
        return bool(self.is_active) and not self.is_deleted

    def __repr__(self) -> str:
        return "<{}(id={}, name='{}')>".format(type(self).__name__, self.id, self.name)


__all__ = ["AuditMixin", "ReferenceMixin", "SoftDeleteMixin"]
