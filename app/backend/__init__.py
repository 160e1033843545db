"""Backend package for the MongoDB dump job."""
