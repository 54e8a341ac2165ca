"""
Document API modules.

- common.py: Shared dependencies and logging helpers
- document_upload.py: POST /documents/upload
- document_management.py: GET /documents, DELETE /documents/{id}
- document_download.py: GET /documents/{id}
"""
