"""DocuVault.

Multi-tenant document management backend.

High-level architecture
-----------------------

- **Tenants** own an isolated tree of folders and the documents filed in them.
  Document bytes live in S3-compatible object storage; the database only keeps
  metadata and the object key.
- **Staff users** of a tenant create, rename, move and delete folders and
  documents. Every lookup is scoped to the caller's tenant.
- **Notification fan-out** informs the tenant admin of staff activity and the
  master admin of tenant lifecycle events, in-app and by email. Fan-out is
  best-effort and never fails the operation that triggered it.

Core subpackages
----------------

- ``docuvault.core``: logging, monitoring, error types, database entities,
  repositories and the I/O models shared by the API.
- ``docuvault.server``: FastAPI application, routers, services and middleware.
"""

__version__ = "0.1.0"
