"""GitHub API and GitHub Actions runtime helpers."""
