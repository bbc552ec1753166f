"""UDP endpoint discovery and latency ranking for Cloudflare WARP."""

__version__ = "0.1.0"
