"""Short-form video planning: regional context, prompts, parsing, dedup and generation."""
