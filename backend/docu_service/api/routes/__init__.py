# API routes
from docu_service.api.routes import health
from docu_service.api.routes import ingestion
from docu_service.api.routes import webhooks_worker

__all__ = ["health", "ingestion", "webhooks_worker"]
