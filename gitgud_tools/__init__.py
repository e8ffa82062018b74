"""GitGud tools: prompt-driven hands-on coding exercises for AI assistants."""
