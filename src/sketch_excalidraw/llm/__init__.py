"""OpenAI-backed generative collaborators."""
