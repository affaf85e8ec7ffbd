"""Audio capture and pitch estimation collaborators."""
