# incubator -- FastAPI server + relational store for startup-incubation records
#
# Modules:
#   app            -- FastAPI application factory with lifespan-managed database
#   config         -- environment configuration (.env)
#   database       -- explicit async engine / session handle (PostgreSQL or SQLite)
#   models         -- SQLAlchemy ORM models (startups and their child records)
#   schemas        -- Pydantic request/response schemas
#   normalize      -- legacy export field mapping (stages, dates, numbers)
#   repository     -- persistence port + SQLAlchemy implementation
#   importer       -- reconciling importer for legacy export bundles
#   migrate_export -- command-line import of an export JSON file
#   auth           -- bearer token -> role guard
#   routes/        -- API endpoints (migration, startups, meetings, admin)
