"""KYC checks that confirm applicant data against external sources."""
