"""Plain constants shared by the API and the scaffolder (no settings access)."""

# Value shipped in .env.example; treated the same as an unset secret
PLACEHOLDER_JWT_SECRET = "change-me-to-a-long-random-string"
