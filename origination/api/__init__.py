"""HTTP API for staff review and applicant self-service."""
