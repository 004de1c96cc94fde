"""FinLens: personal-finance analytics engine and HTTP API."""
