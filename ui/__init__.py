"""Qt adapters: countdown panel and web display surface."""
