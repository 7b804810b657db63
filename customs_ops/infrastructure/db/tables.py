from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

uploads = Table(
    "uploads",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("filename", String(255), nullable=False),
    Column("environment", String(16), nullable=False),
    Column("status", String(32), nullable=False),
    Column("total_rows", Integer, nullable=False, default=0),
    Column("rows", JSON, nullable=False),
    Column("validation_errors", JSON),
    Column("processing_results", JSON),
    Column("processing_completed_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

shipments = Table(
    "shipments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("environment", String(16), nullable=False),
    Column("external_id", String(100), nullable=False),
    Column("master_bill_prefix", String(4), nullable=False),
    Column("master_bill_serial", String(11), nullable=False),
    Column("provider_shipment_id", String(64)),
    Column("status", String(32), nullable=False),
    Column("registration_request", JSON),
    Column("registered_at", DateTime(timezone=True)),
    Column("verification_code", Integer),
    Column("verification_status", String(64)),
    Column("verification_reason_code", String(64)),
    Column("verification_reason_description", Text),
    Column("verification_document_type", String(8)),
    Column("verification_document", Text),
    Column("verified_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

packages = Table(
    "packages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("upload_id", Integer, ForeignKey("uploads.id", ondelete="SET NULL")),
    Column("shipment_id", Integer, ForeignKey("shipments.id", ondelete="SET NULL")),
    Column("environment", String(16), nullable=False),
    Column("external_id", String(100), nullable=False),
    Column("house_bill_number", String(12)),
    Column("barcode", String(100)),
    Column("provider_package_id", String(64)),
    Column("status", String(32), nullable=False),
    Column("screening_code", Integer),
    Column("screening_status", String(64)),
    Column("screening_response", JSON),
    Column("label_qr_code", Text),
    Column("screened_at", DateTime(timezone=True)),
    Column("platform_id", String(64)),
    Column("seller_id", String(100)),
    Column("export_country", String(2)),
    Column("destination_country", String(2)),
    Column("weight_value", Numeric(12, 3)),
    Column("weight_unit", String(1)),
    Column("shipper", JSON),
    Column("consignee", JSON),
    Column("screening_request", JSON),
    Column("ddpn", String(64)),
    Column("total_duty", Numeric(12, 2)),
    Column("duty_paid_at", DateTime(timezone=True)),
    Column("audit_status", String(16)),
    Column("audit_images", JSON),
    Column("audit_remark", String(100)),
    Column("original_package_id", Integer),
    Column("resubmission_count", Integer, nullable=False, default=0),
    Column("correction_notes", Text),
    Column("corrected_at", DateTime(timezone=True)),
    Column("corrected_by", String(64)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_packages_user_status", "user_id", "status"),
)

api_failures = Table(
    "api_failures",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False),
    Column("endpoint", String(64), nullable=False),
    Column("method", String(8), nullable=False, default="POST"),
    Column("environment", String(16), nullable=False),
    Column("upload_id", Integer),
    Column("package_id", Integer),
    Column("shipment_id", Integer),
    Column("external_id", String(100)),
    Column("row_number", Integer),
    Column("request_body", JSON, nullable=False),
    Column("status_code", Integer),
    Column("error_code", String(64)),
    Column("error_message", Text),
    Column("error_details", JSON),
    Column("retry_status", String(32), nullable=False),
    Column("retry_count", Integer, nullable=False, default=0),
    Column("max_retries", Integer, nullable=False, default=3),
    Column("last_retry_at", DateTime(timezone=True)),
    Column("next_retry_at", DateTime(timezone=True)),
    Column("resolved_at", DateTime(timezone=True)),
    Column("resolved_by", String(64)),
    Column("resolution_notes", Text),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_api_failures_user_status", "user_id", "retry_status"),
    Index("ix_api_failures_upload", "upload_id"),
)

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False),
    Column("action", String(64), nullable=False),
    Column("entity_type", String(32), nullable=False),
    Column("entity_id", Integer),
    Column("upload_id", Integer),
    Column("package_id", Integer),
    Column("shipment_id", Integer),
    Column("changes", JSON),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True)),
    Index("ix_audit_logs_entity", "entity_type", "entity_id"),
)

tracking_events = Table(
    "tracking_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False),
    Column("entity_type", String(16), nullable=False),
    Column("entity_id", Integer, nullable=False),
    Column("provider_entity_id", String(64)),
    Column("event_type", String(64), nullable=False),
    Column("event_description", Text),
    Column("event_time", DateTime(timezone=True), nullable=False),
    Column("event_data", JSON),
    Column("environment", String(16), nullable=False),
    Column("fetched_at", DateTime(timezone=True)),
    UniqueConstraint(
        "entity_type", "entity_id", "event_type", "event_time", name="uq_tracking_events_natural_key"
    ),
)

user_platforms = Table(
    "user_platforms",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("platform_id", String(64), nullable=False),
    Column("platform_url", String(255)),
    Column("is_enabled", Boolean, nullable=False, default=True),
    Column("seller_id", String(100)),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    UniqueConstraint("user_id", "platform_id", name="uq_user_platforms_user_platform"),
)
