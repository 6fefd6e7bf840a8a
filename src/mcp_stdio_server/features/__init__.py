"""Tools, resources, prompts and the content they exchange."""
