"""Campaign Monitor API client."""
