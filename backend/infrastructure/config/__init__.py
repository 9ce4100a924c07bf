"""Infrastructure-side settings (env/.env driven)."""
