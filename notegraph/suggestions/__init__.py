"""AI-suggested connections: candidate ranking, model requests, decoding and committing."""
