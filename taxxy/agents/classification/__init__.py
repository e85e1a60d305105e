"""Transaction classification: correction retrieval, prompting and response parsing."""
