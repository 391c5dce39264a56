"""
Cloudflare DDNS - keep Cloudflare DNS records pointed at your external IP.

This package resolves the caller's public IPv4/IPv6 address through an
external echo service and rewrites the matching A/AAAA records of a
Cloudflare zone.
"""

__version__ = "1.0.0"
__author__ = "Cloudflare DDNS Contributors"
